"""Shared fixtures: parse-and-analyze helpers and a clean configuration."""
import pytest

from fetchlint.analyzer.engine import AnalysisOptions, FetchContractAnalyzer
from fetchlint.analyzer.parser import LanguageParser
from fetchlint.config import reset_config

CONFIG_VARS = ('FETCHLINT_TARGET', 'FETCHLINT_REQUIRE_QUERY_BUILDER', 'FETCHLINT_RULES')


def run_analysis(code, rules=None, language='javascript', **options):
    """Analyze ``code`` with the given rules and AnalysisOptions overrides."""
    analyzer = FetchContractAnalyzer(options=AnalysisOptions(**options), rules=rules)
    return analyzer.analyze_source(code, language=language)


def find_nodes(root, kind, text=None):
    """All nodes of ``kind`` under ``root`` (optionally with exact source text), in pre-order."""
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == kind and (text is None or node.text.decode('utf-8') == text):
            found.append(node)
        stack.extend(reversed(node.children))
    return found


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep FETCHLINT_* variables and the config singleton out of every test."""
    for var in CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def analyze():
    """Return the parse-and-analyze helper."""
    return run_analysis


@pytest.fixture
def parse():
    """Return a helper parsing JavaScript source into a tree-sitter root node."""
    parser = LanguageParser('javascript')

    def _parse(code):
        return parser.parse_source(code).root_node

    return _parse


@pytest.fixture
def find():
    """Return the node search helper."""
    return find_nodes


@pytest.fixture
def find_one():
    """Return a helper fetching the first node of a kind (asserting it exists)."""
    def _find_one(root, kind, text=None):
        nodes = find_nodes(root, kind, text)
        assert nodes, f"no {kind} node matching {text!r}"
        return nodes[0]

    return _find_one
