# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Persistent prefix trie over item names with exact and fuzzy lookup.

`Trie.add` never touches the receiver: it copies the nodes on the paths it
extends and shares every other subtree with the original, so environments
can be extended cheaply and older snapshots stay valid.

`levenshtein_lookup` walks the trie carrying one row of the edit-distance
table per node (the row for the prefix spelled by the path). A subtree is
abandoned once every entry of its row exceeds the distance budget, because
extending the prefix can only keep or grow those distances.
"""

from __future__ import annotations

from typing import Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

V = TypeVar("V")


class _Node(Generic[V]):
	__slots__ = ("children", "values")

	def __init__(self, children: Dict[str, "_Node[V]"], values: Tuple[V, ...]) -> None:
		self.children = children
		self.values = values


class Trie(Generic[V]):
	"""Immutable name -> values index. Values under one name keep insertion order."""

	__slots__ = ("_root", "_size")

	def __init__(self, pairs: Iterable[Tuple[str, V]] = (), *, _root: Optional[_Node[V]] = None, _size: int = 0) -> None:
		if _root is None:
			built = Trie._extend(_Node({}, ()), 0, pairs)
			_root, _size = built._root, built._size
		self._root = _root
		self._size = _size

	@staticmethod
	def _extend(base: _Node[V], size: int, pairs: Iterable[Tuple[str, V]]) -> "Trie[V]":
		root: _Node[V] = _Node(dict(base.children), base.values)
		# Nodes created for this extension; they may be mutated until we return.
		fresh = {id(root)}
		for name, value in pairs:
			node = root
			for ch in name:
				child = node.children.get(ch)
				if child is None:
					child = _Node({}, ())
					fresh.add(id(child))
					node.children[ch] = child
				elif id(child) not in fresh:
					child = _Node(dict(child.children), child.values)
					fresh.add(id(child))
					node.children[ch] = child
				node = child
			node.values = node.values + (value,)
			size += 1
		return Trie(_root=root, _size=size)

	def add(self, pairs: Iterable[Tuple[str, V]]) -> "Trie[V]":
		"""Return a new trie holding this trie's entries plus `pairs`."""
		return Trie._extend(self._root, self._size, pairs)

	def get(self, name: str) -> List[V]:
		"""Every value stored under exactly `name`."""
		node = self._root
		for ch in name:
			node = node.children.get(ch)
			if node is None:
				return []
		return list(node.values)

	def __len__(self) -> int:
		return self._size

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and bool(self.get(name))


def levenshtein_lookup(trie: Trie[V], typed: str, max_distance: int) -> List[Tuple[int, V]]:
	"""
	`(distance, value)` for every value whose name is within `max_distance`
	edits of `typed`, sorted by distance (ties keep trie order).
	"""
	if max_distance < 0:
		return []
	n = len(typed)
	first = list(range(n + 1))
	root = trie._root
	found: List[Tuple[int, V]] = []
	if first[n] <= max_distance:
		found.extend((first[n], v) for v in root.values)
	stack: List[Tuple[_Node[V], str, List[int]]] = [
		(child, ch, first) for ch, child in reversed(list(root.children.items()))
	]
	while stack:
		node, ch, prev = stack.pop()
		row = [prev[0] + 1]
		for j in range(1, n + 1):
			cost = 0 if typed[j - 1] == ch else 1
			row.append(min(row[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost))
		if row[n] <= max_distance and node.values:
			found.extend((row[n], v) for v in node.values)
		if min(row) <= max_distance:
			stack.extend((child, c, row) for c, child in reversed(list(node.children.items())))
	found.sort(key=lambda dv: dv[0])
	return found


__all__ = ["Trie", "levenshtein_lookup"]
