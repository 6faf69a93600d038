import unittest

import numpy as np

from prune_graph.builder import build_graph
from prune_graph.graph import Graph


def small_graph() -> Graph:
    # a-b, a-b (multi-edge), b-c, c-c (self-loop), d isolated
    return Graph(
        ["a", "b", "c", "d"],
        np.array([0, 0, 1, 2]),
        np.array([1, 1, 2, 2]),
        np.array([0.5, 0.25, 1.0, 2.0]),
    )


class GraphTests(unittest.TestCase):
    def test_counts(self) -> None:
        g = small_graph()
        self.assertEqual(g.node_count(), 4)
        self.assertEqual(g.edge_count(), 4)
        self.assertEqual(list(g.labels()), ["a", "b", "c", "d"])

    def test_incidence(self) -> None:
        g = small_graph()
        self.assertEqual(sorted(g.incident_edges(0).tolist()), [0, 1])
        self.assertEqual(sorted(g.incident_edges(1).tolist()), [0, 1, 2])
        # self-loop listed once
        self.assertEqual(sorted(g.incident_edges(2).tolist()), [2, 3])
        self.assertEqual(g.degree(3), 0)

    def test_neighbors(self) -> None:
        g = small_graph()
        self.assertEqual(g.neighbors(0).tolist(), [1])
        self.assertEqual(g.neighbors(1).tolist(), [0, 2])
        self.assertEqual(g.neighbors(2).tolist(), [1, 2])
        self.assertEqual(g.neighbors(3).tolist(), [])

    def test_remove_node(self) -> None:
        g = small_graph()
        self.assertEqual(g.remove_node(1), "b")
        self.assertEqual(g.node_count(), 3)
        self.assertEqual(g.edge_count(), 1)
        self.assertFalse(g.is_live(1))
        self.assertEqual(g.neighbors(0).tolist(), [])
        self.assertEqual(g.neighbors(2).tolist(), [2])
        self.assertEqual(list(g.labels()), ["a", "c", "d"])
        with self.assertRaises(KeyError):
            g.remove_node(1)

    def test_no_live_edge_touches_removed_node(self) -> None:
        g = small_graph()
        g.remove_node(2)
        live = g.live_edges()
        ends = set(g.src[live].tolist()) | set(g.dst[live].tolist())
        self.assertTrue(all(g.is_live(n) for n in ends))

    def test_subset(self) -> None:
        g = small_graph()
        removed = g.subset(["a", "b", "zzz"])
        self.assertEqual(removed, 2)
        self.assertEqual(list(g.labels()), ["a", "b"])
        self.assertEqual(g.edge_count(), 2)

    def test_to_dot(self) -> None:
        g, _ = build_graph(['x"1\ty\t0.5'], weight_field="column_3")
        self.assertEqual(
            g.to_dot(),
            'graph {\n    0 [ label = "x\\"1" ]\n    1 [ label = "y" ]\n    0 -- 1 [ label = "0.5" ]\n}\n',
        )

    def test_bad_edges(self) -> None:
        with self.assertRaises(ValueError):
            Graph(["a"], np.array([0]), np.array([1]), np.array([1.0]))
        with self.assertRaises(ValueError):
            Graph(["a", "b"], np.array([0]), np.array([1, 0]), np.array([1.0]))


if __name__ == "__main__":
    unittest.main()
