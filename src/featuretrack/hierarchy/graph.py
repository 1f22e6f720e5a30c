"""GraphViz export of resolved descriptor trees.

Uses ``pydot`` to render the execution hierarchy as a DOT digraph so it
can be inspected with standard GraphViz tooling.  Node names are the
string form of each :class:`HierarchyKey`; containers are drawn as
folders and tests as boxes.
"""

from __future__ import annotations

import pydot

from featuretrack.hierarchy.resolver import Descriptor, DescriptorKind

_SHAPES = {
    DescriptorKind.CONTAINER: "folder",
    DescriptorKind.TEST: "box",
}


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _quote(value: str) -> str:
    return f'"{_escape(value)}"'


def _label(descriptor: Descriptor) -> str:
    lines = [descriptor.display_name or descriptor.key.last.type]
    if descriptor.tags:
        lines.append(" ".join(sorted(descriptor.tags)))
    return '"' + "\\n".join(_escape(line) for line in lines) + '"'


def to_dot(descriptors: list[Descriptor], name: str = "hierarchy") -> pydot.Dot:
    """Build a :class:`pydot.Dot` graph of *descriptors* and their children."""
    graph = pydot.Dot(name, graph_type="digraph", rankdir="LR")
    for root in descriptors:
        for descriptor in root.walk():
            node_name = _quote(str(descriptor.key))
            graph.add_node(
                pydot.Node(
                    node_name,
                    label=_label(descriptor),
                    shape=_SHAPES[descriptor.kind],
                )
            )
            for child in descriptor.children:
                graph.add_edge(pydot.Edge(node_name, _quote(str(child.key))))
    return graph


def to_dot_string(descriptors: list[Descriptor], name: str = "hierarchy") -> str:
    return to_dot(descriptors, name=name).to_string()
