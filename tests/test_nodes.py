import pytest

from conftest import frame
from figma_exporter.errors import ConfigurationError, ProtocolError
from figma_exporter.models import Node
from figma_exporter.nodes import decode_document, decode_node, flatten_nodes


FILE_RESPONSE = {
    "name": "Design",
    "role": "owner",
    "lastModified": "2024-01-01T00:00:00Z",
    "thumbnailUrl": "https://thumb.test/x.png",
    "version": "123",
    "schemaVersion": 0,
    "components": {},
    "styles": {},
    "document": {
        "id": "0:0",
        "name": "Document",
        "type": "DOCUMENT",
        "children": [
            {
                "id": "0:1",
                "name": "Page 1",
                "type": "CANVAS",
                "children": [
                    {"id": "1:1", "name": "Login", "type": "FRAME", "visible": False},
                    {"id": "1:2", "name": "Signup", "type": "FRAME"},
                ],
            }
        ],
    },
}


def tree():
    """canvas -> [A -> [A1 -> [A1a]], B -> [B1]]"""
    return Node(
        id="0:1",
        name="Page",
        type="CANVAS",
        children=(
            frame("1:1", "A", [frame("2:1", "A1", [frame("3:1", "A1a")])]),
            frame("1:2", "B", [frame("2:2", "B1")]),
        ),
    )


class TestDecodeDocument:
    def test_decodes_metadata_and_tree(self):
        document = decode_document(FILE_RESPONSE)
        assert document.name == "Design"
        assert document.last_modified == "2024-01-01T00:00:00Z"
        assert document.schema_version == 0
        page = document.document.children[0]
        assert page.type == "CANVAS"
        assert [child.id for child in page.children] == ["1:1", "1:2"]

    def test_visible_defaults_to_true(self):
        page = decode_document(FILE_RESPONSE).document.children[0]
        assert page.children[0].visible is False
        assert page.children[1].visible is True

    def test_missing_document_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            decode_document({"name": "Design"})

    def test_non_object_payload_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            decode_document(["not", "a", "file"])

    def test_node_without_id_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            decode_node({"name": "nameless", "children": []})

    def test_children_must_be_a_list(self):
        with pytest.raises(ProtocolError):
            decode_node({"id": "1:1", "name": "x", "children": {"id": "1:2"}})

    def test_missing_children_means_leaf(self):
        node = decode_node({"id": "1:1", "name": "Leaf"})
        assert node.children == ()


class TestFlattenNodes:
    def test_depth_one_is_immediate_children(self):
        assert [n.name for n in flatten_nodes(tree(), 1)] == ["A", "B"]

    def test_parents_and_descendants_coexist(self):
        assert [n.name for n in flatten_nodes(tree(), 2)] == ["A", "B", "A1", "B1"]
        assert [n.name for n in flatten_nodes(tree(), 3)] == ["A", "B", "A1", "B1", "A1a"]

    def test_each_level_adds_children_of_previous_level(self):
        root = tree()
        for depth in range(1, 4):
            shallow = flatten_nodes(root, depth)
            deeper = flatten_nodes(root, depth + 1)
            assert deeper[: len(shallow)] == shallow
            added = deeper[len(shallow):]
            previous = flatten_nodes(root, depth - 1) if depth > 1 else []
            frontier = shallow[len(previous):]
            assert added == [child for node in frontier for child in node.children]

    def test_depth_beyond_tree_is_stable(self):
        assert flatten_nodes(tree(), 10) == flatten_nodes(tree(), 3)

    def test_depth_below_one_is_rejected(self):
        with pytest.raises(ConfigurationError):
            flatten_nodes(tree(), 0)

    def test_deterministic(self):
        assert flatten_nodes(tree(), 3) == flatten_nodes(tree(), 3)


def test_deeply_nested_tree_is_protocol_error():
    node = {"id": "9:0", "name": "leaf"}
    for level in range(5000):
        node = {"id": f"9:{level + 1}", "name": "wrap", "children": [node]}
    with pytest.raises(ProtocolError, match="nested too deeply"):
        decode_document({"name": "Deep", "document": node})
