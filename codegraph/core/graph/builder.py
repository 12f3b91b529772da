"""
Graph builder: turns a flat list of project file paths into a CodeGraph.

Folders are derived from path prefixes. Every node except the synthesized
root has exactly one incoming ``contains`` edge from its immediate parent;
top-level items hang off the root.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from codegraph.core.graph.technologies import detect_language, detect_technologies
from codegraph.models.graph import CodeGraph, EdgeType, GraphEdge, GraphNode, NodeType
from codegraph.utils.id_generator import generate_node_id
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)

ROOT_PATH = ""
ROOT_NAME = "root"
ROOT_NODE_ID = generate_node_id(NodeType.FOLDER.value, ROOT_PATH)


def _parent_path(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ROOT_PATH


def _folder_paths(files: list[str]) -> list[str]:
    """Distinct ancestor folder paths, in first-seen order."""
    folders: dict[str, None] = {}
    for path in files:
        parts = path.split("/")
        for depth in range(1, len(parts)):
            folders.setdefault("/".join(parts[:depth]))
    return list(folders)


def build_code_graph(
    project_id: str,
    files: Iterable[str],
    generated_at: datetime | None = None,
) -> CodeGraph:
    """
    Build the hierarchical graph of a project.

    Files listed twice collapse into one node. The same file list in any
    order yields the same node and edge sets.

    Args:
        project_id: Project identifier stored on the graph
        files: Relative, forward-slash separated file paths
        generated_at: Build timestamp (defaults to now, UTC)

    Returns:
        Immutable CodeGraph including detected technologies
    """
    files = list(dict.fromkeys(files))
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
    folder_ids: dict[str, str] = {}

    def folder_id(path: str) -> str:
        # Root is created lazily, once, on first use
        if path == ROOT_PATH and ROOT_PATH not in folder_ids:
            nodes.append(
                GraphNode(
                    id=ROOT_NODE_ID,
                    type=NodeType.FOLDER,
                    name=ROOT_NAME,
                    path=ROOT_PATH,
                )
            )
            folder_ids[ROOT_PATH] = ROOT_NODE_ID
        return folder_ids[path]

    folders = _folder_paths(files)
    for path in folders:
        folder_ids[path] = generate_node_id(NodeType.FOLDER.value, path)

    for path in folders:
        node = GraphNode(
            id=folder_ids[path],
            type=NodeType.FOLDER,
            name=path.rsplit("/", 1)[-1],
            path=path,
        )
        parent_id = folder_id(_parent_path(path))
        nodes.append(node)
        edges.append(GraphEdge(source=parent_id, target=node.id))

    for path in files:
        node = GraphNode(
            id=generate_node_id(NodeType.FILE.value, path),
            type=NodeType.FILE,
            name=path.rsplit("/", 1)[-1],
            path=path,
            language=detect_language(path),
        )
        parent_id = folder_id(_parent_path(path))
        nodes.append(node)
        edges.append(GraphEdge(source=parent_id, target=node.id, type=EdgeType.CONTAINS))

    graph = CodeGraph(
        project_id=project_id,
        generated_at=generated_at or datetime.now(UTC),
        nodes=tuple(nodes),
        edges=tuple(edges),
        technologies=tuple(detect_technologies(files)),
    )

    logger.debug(
        f"Built graph for {project_id}: {graph.node_count} nodes, {graph.edge_count} edges",
        extra={"project_id": project_id, "files": len(files)},
    )
    return graph
