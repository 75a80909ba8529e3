import re
from typing import Iterable, List, Optional, Union

from models.schemas import GeneratedFile
from services.file_set import FileSet
from services.manifest_svc import extract_permissions
from utils.logger import get_logger

logger = get_logger("preview")

PREVIEW_UNAVAILABLE_HTML = (
    '<body style="background-color: #111827; color: #d1d5db; font-family: sans-serif; '
    'display: flex; align-items: center; justify-content: center; height: 100vh; text-align: center;">'
    '<div><h2>Preview Not Available</h2>'
    '<p>This extension runs on web pages, not in a popup. Follow the instructions to test it.</p>'
    '</div></body>'
)

# <script ... src="REF"></script> with an empty body; a script carrying inline code is left alone
_SCRIPT_SRC_RE = re.compile(
    r'<script\s+[^>]*?(?<![\w-])src\s*=\s*(?:"([^"]+)"|\'([^\']+)\')[^>]*>\s*</script\s*>',
    re.IGNORECASE,
)
_LINK_TAG_RE = re.compile(r'<link\b[^>]*>', re.IGNORECASE)
_ATTR_RE = re.compile(r'([^\s=/>"\']+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')
_CLOSE_SCRIPT_RE = re.compile(r'</(script)', re.IGNORECASE)
_CLOSE_STYLE_RE = re.compile(r'</(style)', re.IGNORECASE)


def _as_file_set(files: Union[FileSet, Iterable[GeneratedFile]]) -> FileSet:
    return files if isinstance(files, FileSet) else FileSet(files)


def _comment_safe(ref: str) -> str:
    # "--" is not allowed inside an HTML comment
    return ref.replace("--", "- -")


def _link_attrs(tag: str) -> dict:
    attrs = {}
    for name, dq, sq in _ATTR_RE.findall(tag):
        attrs.setdefault(name.lower(), dq if dq else sq)
    return attrs


def find_entry_page(files: Union[FileSet, Iterable[GeneratedFile]]) -> Optional[GeneratedFile]:
    """The first .html file is the page rendered in the preview."""
    for f in _as_file_set(files):
        if f.filename.endswith(".html"):
            return f
    return None


def compose_preview(files: Union[FileSet, Iterable[GeneratedFile]]) -> str:
    """
    Build one self-contained HTML document from the file set: the entry page
    with every same-set <script src> and stylesheet <link> inlined. References
    that do not resolve become placeholder comments. Pure, no I/O.
    """
    file_set = _as_file_set(files)
    page = find_entry_page(file_set)
    if page is None:
        return PREVIEW_UNAVAILABLE_HTML

    def inline_script(match):
        ref = match.group(1) or match.group(2)
        found = file_set.resolve_reference(ref)
        if found is None:
            return f"<!-- script not found: {_comment_safe(ref)} -->"
        body = _CLOSE_SCRIPT_RE.sub(r'<\\/\1', found.content)
        # "<!--" followed by "<script" puts the parser in double-escaped script data
        body = body.replace("<!--", "<\\!--")
        return f"<script>{body}</script>"

    def inline_style(match):
        tag = match.group(0)
        attrs = _link_attrs(tag)
        if attrs.get("rel", "").strip().lower() != "stylesheet" or not attrs.get("href"):
            return tag
        ref = attrs["href"]
        found = file_set.resolve_reference(ref)
        if found is None:
            return f"<!-- stylesheet not found: {_comment_safe(ref)} -->"
        body = _CLOSE_STYLE_RE.sub(r'<\\/\1', found.content)
        return f"<style>{body}</style>"

    html = _SCRIPT_SRC_RE.sub(inline_script, page.content)
    html = _LINK_TAG_RE.sub(inline_style, html)
    return html


class PreviewService:
    """
    Derived views of the workspace files: the composed preview document and
    the manifest permissions. Recomputed whenever the workspace publishes a
    change, so reads are cheap.
    """

    def __init__(self, workspace=None):
        self.document: str = PREVIEW_UNAVAILABLE_HTML
        self.permissions: List = []
        self.revision = -1
        if workspace is not None:
            workspace.subscribe(self.refresh)
            self.refresh(workspace)

    def refresh(self, workspace):
        if workspace.revision == self.revision:
            return
        self.document = compose_preview(workspace.files)
        self.permissions = extract_permissions(workspace.files)
        self.revision = workspace.revision
        logger.debug(f"Preview recomposed (revision {self.revision}, {len(workspace.files)} files)")
