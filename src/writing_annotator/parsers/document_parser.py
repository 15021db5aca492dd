import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".txt", ".md", ".docx")

# BOM, zero-width characters and soft hyphens
_INVISIBLE_RE = re.compile(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]")


def parse_document(file_path: str | Path) -> str:
    """Read a document file (TXT, MD, DOCX) and return its plain text."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".docx":
        return clean_text(_parse_docx(path))
    elif suffix in (".txt", ".md"):
        return clean_text(path.read_text(encoding="utf-8"))
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")


def clean_text(text: str) -> str:
    """Remove invisible characters and normalize line endings.

    Visible characters are left untouched so that offsets computed on the
    cleaned text line up with what the writer sees.
    """
    text = _INVISIBLE_RE.sub("", text)
    return text.replace("\r\n", "\n").replace("\r", "\n")


def write_document(file_path: str | Path, text: str, *, template: str | Path | None = None) -> Path:
    """Write ``text`` back to a TXT, MD or DOCX file.

    A .docx target is edited paragraph by paragraph so styles and run
    formatting survive: ``template`` (or the target itself, if it exists) is
    opened and only paragraphs whose text changed are rewritten. The line
    structure must still match the source document's paragraphs.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file format: {path.suffix}")

    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".docx":
        source = Path(template) if template is not None else path
        if source.suffix.lower() != ".docx" or not source.exists():
            source = None
        _write_docx(path, text, source)
    else:
        path.write_text(text, encoding="utf-8")
    return path


def _parse_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs)


def _write_docx(path: Path, text: str, source: Path | None = None) -> None:
    from docx import Document

    lines = text.split("\n")
    if source is None:
        doc = Document()
        for line in lines:
            doc.add_paragraph(line)
        doc.save(str(path))
        return

    doc = Document(str(source))
    paragraphs = doc.paragraphs
    # A paragraph with line breaks spans several lines of the parsed text
    widths = [clean_text(p.text).count("\n") + 1 for p in paragraphs]
    if sum(widths) != len(lines):
        raise ValueError(
            f"Cannot update {source.name} in place: the edit changes its paragraph "
            f"structure ({sum(widths)} lines before, {len(lines)} after)"
        )

    changed = 0
    pos = 0
    for para, width in zip(paragraphs, widths):
        new = "\n".join(lines[pos:pos + width])
        pos += width
        if clean_text(para.text) != new:
            _replace_paragraph_text(para, new)
            changed += 1
    doc.save(str(path))
    logger.debug("Rewrote %d of %d paragraphs in %s", changed, len(paragraphs), path.name)


def _replace_paragraph_text(para, new_text: str) -> None:
    """Rewrite a paragraph's text, keeping its style and run formatting.

    Only the differing middle of the old and new text is replaced, inside the
    run where the change starts; runs the change covers are shortened.
    """
    for run in para.runs:
        if _INVISIBLE_RE.search(run.text):
            run.text = clean_text(run.text)
    runs = para.runs
    old_text = "".join(run.text for run in runs)
    if not runs or old_text != clean_text(para.text):
        # Text outside plain runs (e.g. hyperlinks): rebuild from the first run
        _rebuild_paragraph(para, new_text)
        return

    limit = min(len(old_text), len(new_text))
    start = 0
    while start < limit and old_text[start] == new_text[start]:
        start += 1
    tail = 0
    while tail < limit - start and old_text[-1 - tail] == new_text[-1 - tail]:
        tail += 1
    end = len(old_text) - tail
    replacement = new_text[start:len(new_text) - tail]

    offset = 0
    placed = False
    for run in runs:
        text = run.text
        run_start = offset
        offset += len(text)
        if offset < start or offset == start < end or run_start > end:
            continue
        lo = max(start - run_start, 0)
        hi = min(end - run_start, len(text))
        if placed:
            run.text = text[:lo] + text[hi:]
        else:
            run.text = text[:lo] + replacement + text[hi:]
            placed = True


def _rebuild_paragraph(para, new_text: str) -> None:
    """Replace all paragraph content with one run formatted like the first run."""
    fmt = para.runs[0] if para.runs else None
    bold, italic, underline = (fmt.bold, fmt.italic, fmt.underline) if fmt else (None, None, None)
    style = fmt.style if fmt else None
    para.clear()
    run = para.add_run(new_text, style=style)
    run.bold, run.italic, run.underline = bold, italic, underline
