"""
JavaScript support: per-thread Tree-sitter parsing, source discovery and
template literal chunking.
"""
import logging
import os
import threading
from typing import Any, Iterator, List, Tuple

import tree_sitter
import tree_sitter_javascript

from .types import LanguageAdapter, NodeRange

logger = logging.getLogger(__name__)

_SKIP_DIRS = frozenset({"node_modules", "__pycache__"})


class JavaScriptAdapter(LanguageAdapter):
    """Adapter for ``.js``, ``.jsx``, ``.mjs`` and ``.cjs`` sources."""

    def __init__(self):
        # tree-sitter parsers are not safe to share between threads
        self._local = threading.local()

    @property
    def language_id(self) -> str:
        return "javascript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        return (".js", ".jsx", ".mjs", ".cjs")

    def _get_parser(self):
        """This thread's parser, created on first use; None if the grammar fails to load."""
        parser = getattr(self._local, 'parser', None)
        if parser is None:
            try:
                javascript_language = tree_sitter.Language(tree_sitter_javascript.language())
                parser = tree_sitter.Parser()
                parser.language = javascript_language
                logger.debug("JavaScript parser initialized")
            except Exception as e:
                logger.warning("Could not initialize JavaScript parser: %s", e)
                return None
            self._local.parser = parser
        return parser

    def parse(self, text: str) -> Any:
        parser = self._get_parser()
        if parser is None or not isinstance(text, (str, bytes)):
            return None
        source = text if isinstance(text, bytes) else text.encode("utf-8")
        return parser.parse(source)

    def list_files(self, paths: List[str]) -> List[str]:
        """
        Expand files and directories into a sorted list of JavaScript sources.

        Hidden directories, ``node_modules`` and ``__pycache__`` are not entered.
        """
        found = set()

        for path in paths:
            if os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    dirs[:] = [d for d in dirs if not d.startswith(".") and d not in _SKIP_DIRS]
                    found.update(os.path.join(root, name) for name in files if name.endswith(self.file_extensions))
            elif os.path.isfile(path):
                if path.endswith(self.file_extensions):
                    found.add(path)
            else:
                logger.warning("Skipping missing path %s", path)

        return sorted(found)

    def iter_template_spans(self, tree: Any) -> Iterator[NodeRange]:
        """
        Iterate over the literal chunks of template strings.

        A template with substitutions is cut at each ``${ ... }``: the first
        chunk runs from the opening backtick through ``${``, middle chunks run
        from ``}`` through the next ``${``, and the last from ``}`` through
        the closing backtick. Templates nested inside substitutions are
        visited too.

        Yields (start_byte, end_byte) tuples.
        """
        if tree is None:
            return

        def visit_node(node):
            if node.type == 'template_string':
                start = node.start_byte
                for child in node.children:
                    if child.type == 'template_substitution':
                        # "${" belongs to the chunk before, "}" to the chunk after
                        yield (start, child.start_byte + 2)
                        start = child.end_byte - 1
                yield (start, node.end_byte)

            for child in node.children:
                yield from visit_node(child)

        root_node = tree.root_node if hasattr(tree, 'root_node') else tree
        yield from visit_node(root_node)

