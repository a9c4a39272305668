"""Tests for the pre-order tree walker and its ancestry helpers."""
from fetchlint.analyzer.walker import TreeWalker, ancestors, enclosing, following_siblings


class TestTreeWalker:

    def test_pre_order_enter_and_leave(self, parse):
        """Test pre-order enter and leave hooks."""
        root = parse("f(g(1), h(2));")
        events = []
        walker = TreeWalker()
        walker.on_enter('call_expression', lambda n: events.append(('enter', n.text.decode())))
        walker.on_leave('call_expression', lambda n: events.append(('leave', n.text.decode())))
        walker.walk(root)

        assert events == [
            ('enter', 'f(g(1), h(2))'),
            ('enter', 'g(1)'),
            ('leave', 'g(1)'),
            ('enter', 'h(2)'),
            ('leave', 'h(2)'),
            ('leave', 'f(g(1), h(2))'),
        ]

    def test_handlers_run_in_registration_order(self, parse):
        """Test that handlers run in registration order."""
        calls = []
        walker = TreeWalker()
        walker.on_enter('identifier', lambda n: calls.append('first'))
        walker.on_enter('identifier', lambda n: calls.append('second'))
        walker.walk(parse("x;"))
        assert calls == ['first', 'second']

    def test_every_node_visited_once(self, parse, find):
        """Verify every node is visited exactly once."""
        root = parse("const a = [1, [2, [3]]]; function f() { return a; }")
        walker = TreeWalker()
        seen = []
        for kind in ('number', 'identifier', 'array'):
            walker.on_enter(kind, seen.append)
        walker.walk(root)

        expected = find(root, 'number') + find(root, 'identifier') + find(root, 'array')
        assert sorted((n.type, n.start_byte) for n in seen) == sorted((n.type, n.start_byte) for n in expected)
        assert len({(n.type, n.start_byte, n.end_byte) for n in seen}) == len(seen)

    def test_exit_handlers_run_after_walk(self, parse):
        """Test that exit handlers run after the walk."""
        order = []
        walker = TreeWalker()
        walker.on_enter('program', lambda n: order.append('program'))
        walker.on_exit(lambda: order.append('exit'))
        walker.walk(parse("1;"))
        assert order == ['program', 'exit']

    def test_deep_tree_does_not_recurse(self, parse):
        """Test a deep tree without hitting the recursion limit."""
        depth = 3000
        root = parse('x = ' + '(' * depth + '1' + ')' * depth + ';')
        count = []
        walker = TreeWalker()
        walker.on_enter('parenthesized_expression', count.append)
        walker.walk(root)
        assert len(count) == depth


class TestAncestry:

    def test_ancestors_innermost_first(self, parse, find_one):
        """Test that ancestors come innermost first."""
        root = parse("function f() { return g(); }")
        call = find_one(root, 'call_expression')
        kinds = [n.type for n in ancestors(call)]
        assert kinds[0] == 'return_statement'
        assert kinds[-1] == 'program'

    def test_enclosing(self, parse, find_one):
        """Test finding an enclosing node."""
        root = parse("try { (() => { g(); })(); } catch (e) {}")
        call = find_one(root, 'call_expression', 'g()')
        assert enclosing(call, {'try_statement'}).type == 'try_statement'
        assert enclosing(call, {'try_statement'}, stop_at_function=True) is None
        assert enclosing(call, {'class_declaration'}) is None

    def test_following_siblings_skip_comments(self, parse, find_one):
        """Test that following siblings skip comments."""
        root = parse("a(); // note\nb(); c();")
        first = find_one(root, 'expression_statement', 'a();')
        assert [n.text.decode() for n in following_siblings(first)] == ['b();', 'c();']
