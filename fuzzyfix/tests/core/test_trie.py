from __future__ import annotations

from fuzzyfix.core.trie import Trie, levenshtein_lookup


def test_exact_lookup_keeps_insertion_order_per_name():
	t = Trie([("abc", 1), ("ab", 2), ("abc", 3)])
	assert t.get("abc") == [1, 3]
	assert t.get("ab") == [2]
	assert t.get("a") == []
	assert t.get("abcd") == []
	assert len(t) == 3
	assert "ab" in t
	assert "a" not in t


def test_add_is_persistent():
	base = Trie([("x", 1), ("xy", 2)])
	bigger = base.add([("xz", 3), ("x", 4)])
	assert base.get("x") == [1]
	assert base.get("xz") == []
	assert len(base) == 2
	assert bigger.get("x") == [1, 4]
	assert bigger.get("xy") == [2]
	assert bigger.get("xz") == [3]
	assert len(bigger) == 4


def test_empty_name_lives_at_the_root():
	t = Trie([("", "root")])
	assert t.get("") == ["root"]
	assert levenshtein_lookup(t, "a", 1) == [(1, "root")]


def test_levenshtein_lookup_within_budget_sorted_by_distance():
	t = Trie([("cat", "cat"), ("cart", "cart"), ("dog", "dog"), ("cut", "cut"), ("at", "at")])
	got = levenshtein_lookup(t, "cat", 1)
	assert got[0] == (0, "cat")
	assert sorted(got) == [(0, "cat"), (1, "at"), (1, "cart"), (1, "cut")]
	assert [d for d, _ in got] == sorted(d for d, _ in got)


def test_levenshtein_lookup_budget_boundaries():
	t = Trie([("abc", 1), ("xyz", 2)])
	assert levenshtein_lookup(t, "abc", 0) == [(0, 1)]
	assert levenshtein_lookup(t, "abd", 0) == []
	assert levenshtein_lookup(t, "abd", 1) == [(1, 1)]
	assert sorted(levenshtein_lookup(t, "abc", 3)) == [(0, 1), (3, 2)]
	assert levenshtein_lookup(t, "abc", -1) == []


def test_levenshtein_lookup_matches_brute_force():
	def distance(a, b):
		row = list(range(len(b) + 1))
		for i, ca in enumerate(a, 1):
			prev, row[0] = row[0], i
			for j, cb in enumerate(b, 1):
				prev, row[j] = row[j], min(row[j] + 1, row[j - 1] + 1, prev + (ca != cb))
		return row[-1]

	names = ["main", "Main", "max", "min", "length", "len", "charAt", "equals", "abs", "a", "ab"]
	t = Trie((n, n) for n in names)
	for typed in ["mian", "lenght", "eqals", "ax", "x", "charat"]:
		for k in range(3):
			want = sorted((distance(typed, n), n) for n in names if distance(typed, n) <= k)
			assert sorted(levenshtein_lookup(t, typed, k)) == want
