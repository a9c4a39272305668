"""Analysis engine: one walk per unit drives every enabled detector."""
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union
from tree_sitter import Node, Tree

from .bindings import BindingTracker
from .diagnostics import Diagnostic, DiagnosticSink
from .parser import LanguageParser
from .walker import TreeWalker
from fetchlint.rules.registry import get_detector_classes


@dataclass(frozen=True)
class AnalysisOptions:
    """Per-run analysis options."""
    require_query_builder: bool = True
    target_name: str = 'fetch'


@dataclass
class AnalysisContext:
    """Everything one unit's pass shares between trackers and detectors.

    Built fresh for each unit and dropped afterwards; nothing here is shared
    across units, so units can be analyzed in parallel.
    """
    options: AnalysisOptions
    walker: TreeWalker
    bindings: BindingTracker
    sink: DiagnosticSink
    file_path: Optional[str] = None


class FetchContractAnalyzer:
    """Runs the enabled detectors over JavaScript/TypeScript syntax trees."""

    def __init__(self, options: Optional[AnalysisOptions] = None,
                 rules: Optional[Iterable[str]] = None):
        """
        Args:
            options: Analysis options (defaults apply when None)
            rules: Rule ids to enable; None enables every rule

        Raises:
            ValueError: If a rule id is unknown
        """
        self.options = options or AnalysisOptions()
        self.detector_classes = get_detector_classes(rules)

    def create_context(self, source: bytes, file_path: Optional[str] = None) -> AnalysisContext:
        return AnalysisContext(
            options=self.options,
            walker=TreeWalker(),
            bindings=BindingTracker(self.options.target_name),
            sink=DiagnosticSink(file_path, source),
            file_path=file_path,
        )

    def analyze_tree(self, tree: Union[Tree, Node], source: Union[str, bytes],
                     file_path: Optional[str] = None) -> List[Diagnostic]:
        """Analyze one parsed unit.

        Args:
            tree: Parsed tree (or its root node)
            source: The source the tree was parsed from (columns are
                counted in its characters)
            file_path: Optional path recorded on each diagnostic

        Returns:
            Diagnostics in emission order: immediate reports first, in
            traversal order, then deferred ones
        """
        if isinstance(source, str):
            source = source.encode('utf-8')
        root = tree.root_node if isinstance(tree, Tree) else tree

        context = self.create_context(source, file_path)
        # Trackers first so detectors always see up-to-date bindings
        context.bindings.attach(context.walker)
        for detector_cls in self.detector_classes:
            detector_cls(context).attach(context.walker)
        context.walker.on_exit(context.sink.flush)

        context.walker.walk(root)
        return context.sink.diagnostics

    def analyze_source(self, source: Union[str, bytes], language: str = 'javascript',
                       file_path: Optional[str] = None) -> List[Diagnostic]:
        """Parse and analyze in-memory source code."""
        if isinstance(source, str):
            source = source.encode('utf-8')
        tree = LanguageParser(language).parse_source(source)
        return self.analyze_tree(tree, source, file_path)

    def analyze_file(self, file_path: Union[str, Path]) -> Optional[List[Diagnostic]]:
        """Parse and analyze a file.

        Returns:
            Diagnostics, or None if the extension is unsupported or the file
            cannot be read
        """
        file_path = Path(file_path)
        parser = LanguageParser.from_file_extension(file_path)
        if parser is None:
            return None

        try:
            source = file_path.read_bytes()
        except (IOError, OSError):
            return None

        tree = parser.parse_source(source)
        return self.analyze_tree(tree, source, str(file_path))
