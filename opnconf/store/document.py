"""File-backed OPNsense configuration document.

The document is parsed into an ``ElementTree`` that keeps comments and
processing instructions; lookups and new entries go through the tree. The
bytes read from disk are kept next to it. ``save()`` serializes only the
entries added with ``append_entry()``, splices them in front of their
section's closing tag and copies every other byte through as it was read.
"""

from __future__ import annotations

import copy
import os
import re
import shutil
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import NamedTuple, Optional
from xml.parsers import expat

from loguru import logger

from opnconf.exceptions import DocumentError, SectionNotFoundError

_XML_DECLARATION = re.compile(rb"^\s*(<\?xml[^>]*\?>)")
_DECLARED_ENCODING = re.compile(rb"""encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")
DEFAULT_INDENT = "  "


def get_text(element: Optional[ET.Element], default: str = "") -> str:
    """Safely get text content from an XML element."""
    if element is None:
        return default
    return element.text or default


def _detect_indent(root: ET.Element) -> str:
    """Derive the indentation unit from the whitespace before the first child."""
    if root.text and not root.text.strip():
        unit = root.text.rsplit("\n", 1)[-1]
        if unit:
            return unit
    return DEFAULT_INDENT


class _Span(NamedTuple):
    """Byte offsets of one element in the raw document.

    ``start_end`` is just past the start tag; ``end_tag`` is where ``</name>``
    begins, or None for an empty-element tag such as ``<vlans/>``.
    """

    start: int
    start_end: int
    end_tag: Optional[int]


def _tag_end(raw: bytes, pos: int) -> int:
    """Return the offset just past the ``>`` closing the tag that opens at ``pos``."""
    quote = 0
    for i in range(pos + 1, len(raw)):
        ch = raw[i]
        if quote:
            if ch == quote:
                quote = 0
        elif ch in b"\"'":
            quote = ch
        elif ch == ord(">"):
            return i + 1
    raise DocumentError(f"Unterminated tag at byte {pos}")


def _element_spans(raw: bytes) -> list[_Span]:
    """Locate every element of ``raw`` in document order."""
    parser = expat.ParserCreate()
    starts: list[int] = []
    ends: dict[int, int] = {}
    open_elements: list[int] = []

    def on_start(name, attrs):
        open_elements.append(len(starts))
        starts.append(parser.CurrentByteIndex)

    def on_end(name):
        ends[open_elements.pop()] = parser.CurrentByteIndex

    parser.StartElementHandler = on_start
    parser.EndElementHandler = on_end
    try:
        parser.Parse(raw, True)
    except expat.ExpatError as e:
        raise DocumentError(f"Failed to parse XML: {e}") from e

    spans = []
    for index, start in enumerate(starts):
        start_end = _tag_end(raw, start)
        if raw[start_end - 2 : start_end] == b"/>":
            spans.append(_Span(start, start_end, None))
        else:
            spans.append(_Span(start, start_end, ends[index]))
    return spans


class ConfigDocument:
    """Parsed configuration document bound to its file path."""

    def __init__(self, path: Path, tree: ET.ElementTree, raw: bytes) -> None:
        self.path = path
        self.tree = tree
        self.raw = raw
        match = _XML_DECLARATION.match(raw)
        self.declaration = match.group(1) if match else None
        self.indent_unit = _detect_indent(self.root)
        self.newline = "\r\n" if b"\r\n" in raw else "\n"
        self._spans = self._index(raw)
        self._pending: dict[ET.Element, list[ET.Element]] = {}

    @classmethod
    def load(cls, path: str | os.PathLike[str], root_tag: str = "opnsense") -> ConfigDocument:
        """Read and parse a configuration file.

        Raises:
            DocumentError: If the file is missing, unreadable, not well-formed
                XML, or its root element is not ``root_tag``.
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise DocumentError(f"Configuration file {path} does not exist") from e
        except OSError as e:
            raise DocumentError(f"Cannot read configuration file {path}: {e}") from e

        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
        try:
            root = ET.fromstring(raw, parser=parser)
        except ET.ParseError as e:
            raise DocumentError(f"Failed to parse XML in {path}: {e}") from e

        if root.tag != root_tag:
            raise DocumentError(f"Root element of {path} is <{root.tag}>, expected <{root_tag}>")

        logger.debug(f"Loaded {path} ({len(raw)} bytes)")
        return cls(path, ET.ElementTree(root), raw)

    @property
    def root(self) -> ET.Element:
        return self.tree.getroot()

    @property
    def encoding(self) -> str:
        """Encoding named in the XML declaration, UTF-8 if there is none."""
        if self.declaration:
            match = _DECLARED_ENCODING.search(self.declaration)
            if match:
                return match.group(1).decode("ascii")
        return "utf-8"

    def _index(self, raw: bytes) -> dict[ET.Element, _Span]:
        elements = [elem for elem in self.root.iter() if isinstance(elem.tag, str)]
        return dict(zip(elements, _element_spans(raw)))

    def find_section(self, name: str) -> Optional[ET.Element]:
        return self.root.find(name)

    def section(self, name: str) -> ET.Element:
        """Return the top-level section ``name``; a missing section is an error, never created."""
        elem = self.find_section(name)
        if elem is None:
            raise SectionNotFoundError(name, str(self.path))
        return elem

    def _depth(self, target: ET.Element) -> int:
        stack = [(self.root, 0)]
        while stack:
            elem, depth = stack.pop()
            if elem is target:
                return depth
            stack.extend((child, depth + 1) for child in elem)
        raise ValueError("Element is not part of this document")

    def append_entry(self, parent: ET.Element, element: ET.Element, fresh: bool = True) -> ET.Element:
        """Append ``element`` as the last child of ``parent``; it is written on the next ``save()``.

        Args:
            parent: Element already in this document.
            element: The new child.
            fresh: Re-indent the inside of ``element``. Pass False for copies of
                existing elements whose inner whitespace is already right.
        """
        depth = self._depth(parent)
        if fresh:
            ET.indent(element, space=self.indent_unit, level=depth + 1)
        element.tail = None
        parent.append(element)
        self._pending.setdefault(parent, []).append(element)
        return element

    def tostring(self, element: Optional[ET.Element] = None) -> str:
        """Serialize ``element`` (default: the whole root) as text, empty elements as ``<tag/>``."""
        elem = self.root if element is None else element
        # tostring() emits the tail too; compare content, not trailing whitespace
        elem = copy.copy(elem)
        elem.tail = None
        # attribute values and text escape ">", so " />" only closes empty elements
        return ET.tostring(elem, encoding="unicode").replace(" />", "/>")

    def _encode(self, text: str) -> bytes:
        return text.replace("\n", self.newline).encode(self.encoding, "xmlcharrefreplace")

    def _render(self) -> bytes:
        """Return the raw bytes with the pending entries spliced in."""
        edits: list[tuple[int, int, bytes]] = []
        for parent, children in self._pending.items():
            span = self._spans.get(parent)
            if span is None:
                # parent is itself a new entry and is serialized with it
                continue
            depth = self._depth(parent)
            body = "".join("\n" + self.indent_unit * (depth + 1) + self.tostring(child) for child in children)
            closing = "\n" + self.indent_unit * depth

            if span.end_tag is None:
                start_tag = self.raw[span.start : span.start_end - 2].rstrip()
                text = start_tag + b">" + self._encode(body + closing + f"</{parent.tag}>")
                edits.append((span.start, span.start_end, text))
                continue

            inner = self.raw[span.start_end : span.end_tag]
            trailing = len(inner) - len(inner.rstrip())
            if not trailing:
                body += closing
            at = span.end_tag - trailing
            edits.append((at, at, self._encode(body)))

        data = self.raw
        for start, end, text in sorted(edits, reverse=True):
            data = data[:start] + text + data[end:]
        return data

    def save(self) -> None:
        """Write the document back to its path via a temp file and an atomic rename.

        Only entries added through ``append_entry()`` are written; everything
        else is copied from the bytes that were read.
        """
        data = self._render()
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            if self.path.exists():
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise DocumentError(f"Failed to write {self.path}: {e}") from e

        self.raw = data
        self._spans = self._index(data)
        self._pending.clear()
        logger.info(f"Wrote configuration to {self.path}")
