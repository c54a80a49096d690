#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "markdown",
#     "pyyaml",
#     "beautifulsoup4",
#     "fastmcp",
# ]
# ///
"""Convert a markdown document into a standalone HTML page.

Options are merged from caller defaults, command-line flags, the project
manifest (package.json), its "markdown-to-html" section and the markdown's
own YAML frontmatter. The page gets a <title>, meta/link tags, an optional
GitHub corner, and <!--rehype:...--> attribute annotations are applied.

Usage:
    sft_markdown_to_html.py
    sft_markdown_to_html.py --source docs/guide.md --output site/index.html
    sft_markdown_to_html.py --markdown "# Hello" --title "Hello World!"
    sft_markdown_to_html.py --config config/conf.json
    sft_markdown_to_html.py mcp-stdio

Chaining:
    sft_docx2md.py read document.docx > README.md && sft_markdown_to_html.py
"""

import argparse
import copy
import html
import json
import os
import re
import sys
import time
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Comment, Tag


# =============================================================================
# LOGGING
# =============================================================================
_LEVELS = {"TRACE": 5, "DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40, "FATAL": 50}
_THRESHOLD = _LEVELS.get(os.environ.get("SFB_LOG_LEVEL", "INFO"), 20)
_LOG_DIR = os.environ.get("SFB_LOG_DIR", "")
_SCRIPT = Path(__file__).stem
_LOG = (
    Path(_LOG_DIR) / f"{_SCRIPT}_log.tsv"
    if _LOG_DIR
    else Path(__file__).parent / f"{_SCRIPT}_log.tsv"
)
_HEADER = "#timestamp\tscript\tlevel\tevent\tmessage\tdetail\tmetrics\ttrace\n"


def _log(
    level: str,
    event: str,
    msg: str,
    *,
    detail: str = "",
    metrics: str = "",
    trace: str = "",
):
    """Append TSV log line. Logging never crashes the main flow."""
    if _LEVELS.get(level, 20) < _THRESHOLD:
        return
    try:
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
        write_header = not _LOG.exists()
        with open(_LOG, "a") as f:
            if write_header:
                f.write(_HEADER)
            f.write(f"{ts}\t{_SCRIPT}\t{level}\t{event}\t{msg}\t{detail}\t{metrics}\t{trace}\n")
    except Exception:
        pass


# =============================================================================
# CONFIGURATION
# =============================================================================
EXPOSED = ["convert"]

TOOL_NAME = "markdown-to-html"

CONFIG = {
    "version": "1.0.0",
    "extensions": ["tables", "fenced_code", "toc", "sane_lists"],
}

DEFAULT_OPTIONS = {
    "source": "README.md",
    "output": "index.html",
    "config": "package.json",
    "markdown": "",
}

ALIASES = {"h": "help", "v": "version", "c": "config", "s": "source", "o": "output"}

# Ordered candidate sources per derived field. First non-empty value wins.
# "option" is flags over defaults with the manifest tool section laid on top,
# "document" is the tool section's document sub-record.
FIELD_SOURCES = {
    "title": [
        ("document", "title"),
        ("option", "title"),
        ("frontmatter", "title"),
        ("manifest", "name"),
    ],
    "description": [
        ("option", "description"),
        ("frontmatter", "description"),
        ("manifest", "description"),
    ],
    "keywords": [
        ("option", "keywords"),
        ("frontmatter", "keywords"),
        ("manifest", "keywords"),
    ],
    "author": [
        ("option", "author"),
        ("frontmatter", "author"),
    ],
    "github-corners": [
        ("option", "github-corners"),
        ("manifest", "repository"),
    ],
}

META_FIELDS = ["description", "keywords", "author"]

CLI_HELP = f"""
  Usage: {TOOL_NAME} [options] [--help|h]

  Options:

    --author          Define the author of a page.
    --config, -c      Specify the configuration file. Default: "<cwd>/package.json".
    --description     Define a description of your web page.
    --favicon         Add a Favicon to your Site.
    --github-corners  Add a Github corner to your project page.
    --github-corners-fork  Github corners style.
    --keywords        Define keywords for search engines.
    --markdown        Markdown string.
    --output, -o      Output static pages to the specified path. Default: "index.html"
    --source, -s      The path of the target file "README.md". Default: "README.md"
    --title           The `<title>` tag is required in HTML documents!
    --version, -v     Show version number
    --help, -h        Displays help information.

  Commands:

    mcp-stdio         Run as MCP server.
"""

EXAMPLE_HELP = f"""
  Example:

    {TOOL_NAME}
    {TOOL_NAME} --title="Hello World!"
    {TOOL_NAME} --config="config/conf.json"
    {TOOL_NAME} --markdown="Hello World!"
    {TOOL_NAME} --github-corners https://github.com/user/project
    {TOOL_NAME} --github-corners https://github.com/user --github-corners-fork
    {TOOL_NAME} --output coverage/index.html
    {TOOL_NAME} --source README.md
"""


# =============================================================================
# HTML TEMPLATE
# =============================================================================
HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title></title>
</head>
<body>
</body>
</html>"""

MARKDOWN_CSS = """
:root {
    --bg: #ffffff;
    --fg: #1f2328;
    --accent: #0969da;
    --border: #d0d7de;
    --code-bg: #f6f8fa;
}
body { margin: 0; background: var(--bg); color: var(--fg); }
.markdown-body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
    line-height: 1.6;
    max-width: 900px;
    margin: 0 auto;
    padding: 2rem;
    word-wrap: break-word;
}
.markdown-body a { color: var(--accent); text-decoration: none; }
.markdown-body a:hover { text-decoration: underline; }
.markdown-body h1, .markdown-body h2 { border-bottom: 1px solid var(--border); padding-bottom: 0.3em; }
.markdown-body h1 { font-size: 2em; }
.markdown-body h2 { font-size: 1.5em; margin-top: 1.5em; }
.markdown-body h3 { font-size: 1.25em; margin-top: 1.25em; }
.markdown-body table { border-collapse: collapse; margin: 1rem 0; display: block; overflow: auto; }
.markdown-body th, .markdown-body td { border: 1px solid var(--border); padding: 6px 13px; }
.markdown-body th { background: var(--code-bg); font-weight: 600; }
.markdown-body tr:nth-child(2n) { background: var(--code-bg); }
.markdown-body code { background: var(--code-bg); padding: 0.2em 0.4em; border-radius: 6px; font-size: 85%; }
.markdown-body pre { background: var(--code-bg); padding: 16px; border-radius: 6px; overflow: auto; }
.markdown-body pre code { background: none; padding: 0; font-size: 100%; }
.markdown-body blockquote { border-left: 0.25em solid var(--border); margin: 0; padding: 0 1em; color: #59636e; }
.markdown-body hr { border: none; border-top: 1px solid var(--border); margin: 1.5rem 0; }
.markdown-body img { max-width: 100%; }
"""

CORNER_HTML = """<a href="{url}" class="github-corner" aria-label="View source on GitHub" target="_blank" rel="noopener noreferrer"><svg width="80" height="80" viewBox="0 0 250 250" aria-hidden="true"><path d="M0,0 L115,115 L130,115 L142,142 L250,250 L250,0 Z"></path><path d="M128.3,109.0 C113.8,99.7 119.0,89.6 119.0,89.6 C122.0,82.7 120.5,78.6 120.5,78.6 C119.2,72.0 123.4,76.3 123.4,76.3 C127.3,80.9 125.5,87.3 125.5,87.3 C122.9,97.6 130.6,101.9 134.4,103.2" fill="currentColor" class="octo-arm"></path><path d="M115.0,115.0 C114.9,115.1 118.7,116.5 119.8,115.4 L133.7,101.6 C136.9,99.2 139.9,98.4 142.2,98.6 C133.8,88.0 127.5,74.4 143.8,58.0 C148.5,53.4 154.0,51.2 159.7,51.0 C160.3,49.4 163.2,43.6 171.4,40.1 C171.4,40.1 176.1,42.5 178.8,56.2 C183.1,58.6 187.2,61.8 190.9,65.4 C194.5,69.0 197.7,73.2 200.1,77.6 C213.8,80.2 216.3,84.9 216.3,84.9 C212.7,93.1 206.9,96.0 205.4,96.6 C205.1,102.4 203.0,107.8 198.3,112.5 C181.9,128.9 168.3,122.5 157.7,114.1 C157.9,116.9 156.7,120.9 152.7,124.9 L141.0,136.5 C139.8,137.7 141.6,141.9 141.8,141.8 Z" fill="currentColor" class="octo-body"></path></svg></a>"""

CORNER_CSS = """
.github-corner svg { fill: #151513; color: #fff; position: absolute; top: 0; right: 0; border: 0; }
.github-corner .octo-arm { transform-origin: 130px 106px; }
.github-corner:hover .octo-arm { animation: octocat-wave 560ms ease-in-out; }
@keyframes octocat-wave {
    0%, 100% { transform: rotate(0); }
    20%, 60% { transform: rotate(-25deg); }
    40%, 80% { transform: rotate(10deg); }
}
"""

RIBBON_HTML = """<a href="{url}" class="github-fork-ribbon" title="Fork me on GitHub" target="_blank" rel="noopener noreferrer">Fork me on GitHub</a>"""

RIBBON_CSS = """
.github-fork-ribbon {
    position: absolute; top: 42px; right: -48px; width: 200px;
    transform: rotate(45deg); background: #a00; color: #fff;
    text-align: center; font: 700 13px/2 Helvetica, Arial, sans-serif;
    text-decoration: none; box-shadow: 0 2px 3px rgba(0, 0, 0, 0.3);
}
"""

# Structured options only a caller or the manifest can supply, never flags.
PROGRAMMATIC_KEYS = {"document", "reurls", "rewrite", "wrap"}

_ANNOTATION_PREFIX = "rehype:"
_SELECTOR_RE = re.compile(r"^([a-zA-Z][\w-]*)?((?:[.#][\w-]+)*)$")


# =============================================================================
# CORE FUNCTIONS
# =============================================================================

class OutputWriteError(OSError):
    """The rendered page could not be written to the output path."""


def _version() -> str:
    """Installed package version, or CONFIG["version"] when run as a uv script."""
    try:
        return metadata.version(TOOL_NAME)
    except metadata.PackageNotFoundError:
        return CONFIG["version"]


def _normalize_aliases(options: dict) -> dict:
    """Map short option keys (h, v, c, s, o) to their long names."""
    return {ALIASES.get(key, key): value for key, value in options.items() if value is not None}


def _raise_usage_error(message: str):
    raise argparse.ArgumentError(None, message)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        usage=f"{TOOL_NAME} [options] [--help|h]",
        add_help=False,
        allow_abbrev=False,
        argument_default=argparse.SUPPRESS,
    )
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("-v", "--version", action="store_true")
    parser.add_argument("-c", "--config")
    parser.add_argument("-s", "--source")
    parser.add_argument("-o", "--output")
    parser.add_argument("--author")
    parser.add_argument("--description")
    parser.add_argument("--favicon")
    parser.add_argument("--github-corners", dest="github-corners")
    parser.add_argument("--github-corners-fork", dest="github-corners-fork", action="store_true")
    parser.add_argument("--keywords")
    parser.add_argument("--markdown")
    parser.add_argument("--title")
    # Raise instead of exiting, run() is also called as a library function.
    parser.error = _raise_usage_error
    return parser


def _parse_passthrough(extras: list[str]) -> dict:
    """Turn flags argparse does not know into a dict, minimist style.

    --key=value and --key value give strings, a bare --key gives True and
    --no-key gives False. Short groups like -xy set each letter to True.
    Positionals are collected under "_". Keys in PROGRAMMATIC_KEYS are
    dropped.
    """
    parsed: dict[str, Any] = {}
    positionals = []
    i = 0
    while i < len(extras):
        arg = extras[i]
        if arg.startswith("--") and len(arg) > 2:
            key, sep, value = arg[2:].partition("=")
            if sep:
                parsed[key] = value
            elif key.startswith("no-"):
                parsed[key[3:]] = False
            elif i + 1 < len(extras) and not extras[i + 1].startswith("-"):
                parsed[key] = extras[i + 1]
                i += 1
            else:
                parsed[key] = True
        elif arg.startswith("-") and len(arg) > 1:
            for letter in arg[1:]:
                parsed[ALIASES.get(letter, letter)] = True
        else:
            positionals.append(arg)
        i += 1
    for key in PROGRAMMATIC_KEYS & parsed.keys():
        _log("WARN", "flag_ignored", f"--{key} is not a command-line option")
        del parsed[key]
    if positionals:
        parsed["_"] = positionals
    return parsed


def parse_arguments(argv: list[str], defaults: dict | None = None) -> dict:
    """Parse argv into a flags dict laid over the built-in and caller defaults."""
    known, extras = _build_parser().parse_known_args(list(argv))
    return {
        **DEFAULT_OPTIONS,
        **_normalize_aliases(defaults or {}),
        **_parse_passthrough(extras),
        **vars(known),
    }


def load_markdown_source(flags: dict, cwd: Path | str) -> str:
    """Return the literal --markdown string, or read --source relative to cwd."""
    if flags.get("markdown"):
        return flags["markdown"]
    source = Path(cwd) / (flags.get("source") or DEFAULT_OPTIONS["source"])
    return source.read_text(encoding="utf-8")


def load_project_manifest(path: Path | str) -> dict:
    """Load the project manifest. A missing file is an empty manifest."""
    path = Path(path)
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    assert isinstance(data, dict), f"Manifest must be a JSON object: {path}"
    return data


def _extract_frontmatter(text: str) -> tuple[dict, str]:
    """Extract YAML frontmatter from markdown."""
    import yaml

    if text.startswith("---"):
        parts = text.split("---", 2)
        if len(parts) >= 3:
            try:
                metadata = yaml.safe_load(parts[1])
            except yaml.YAMLError as e:
                _log("WARN", "frontmatter_invalid", str(e).replace("\n", " "))
                return {}, text
            if isinstance(metadata, dict):
                return metadata, parts[2].strip()
    return {}, text


def _as_text(value: Any) -> str:
    """Flatten a candidate value: lists join with commas, objects give their url."""
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    if isinstance(value, dict):
        return str(value.get("url") or "")
    return str(value)


def _first_non_empty(sources: dict, candidates: list[tuple[str, str]]) -> str:
    for source, key in candidates:
        value = _as_text(sources.get(source, {}).get(key))
        if value:
            return value
    return ""


def _tool_section(manifest: dict) -> dict:
    section = manifest.get(TOOL_NAME) or {}
    assert isinstance(section, dict), f'Manifest "{TOOL_NAME}" section must be an object'
    document = section.get("document") or {}
    assert isinstance(document, dict), f'Manifest "{TOOL_NAME}.document" must be an object'
    return section


def resolve_github_corner(options: dict, manifest: dict | None = None) -> str:
    """Corner URL from the options or the manifest repository, without git+."""
    url = _first_non_empty(
        {"option": options, "manifest": manifest or {}},
        FIELD_SOURCES["github-corners"],
    )
    return re.sub(r"^git\+", "", url)


def merge_options(
    flags: dict,
    manifest: dict | None = None,
    defaults: dict | None = None,
    frontmatter: dict | None = None,
) -> dict:
    """Merge every configuration source into one Effective Options dict.

    Each stage builds a new dict, nothing passed in is modified:

    1. built-in defaults < caller defaults < flags
    2. the manifest tool section on top of that (except "document")
    3. derived fields (title, meta entries, corner URL) from FIELD_SOURCES
    4. the document record: tool section document keys, resolved title,
       its meta/link lists followed by the computed entries
    """
    manifest = manifest or {}
    section = _tool_section(manifest)
    section_document = section.get("document") or {}

    options = {**DEFAULT_OPTIONS, **_normalize_aliases(defaults or {}), **flags}
    options = {**options, **{k: v for k, v in section.items() if k != "document"}}

    sources = {
        "document": section_document,
        "option": options,
        "frontmatter": frontmatter or {},
        "manifest": manifest,
    }

    meta = [dict(entry) for entry in section_document.get("meta") or []]
    for field in META_FIELDS:
        value = _first_non_empty(sources, FIELD_SOURCES[field])
        if value:
            meta.append({"name": field, "content": value})

    link = [dict(entry) for entry in section_document.get("link") or []]
    if options.get("favicon"):
        link.append({"rel": "icon", "href": options["favicon"], "type": "image/x-icon"})

    document = {
        **copy.deepcopy(section_document),
        "title": _first_non_empty(sources, FIELD_SOURCES["title"]),
        "meta": meta,
        "link": link,
    }
    return {
        **options,
        "github-corners": resolve_github_corner(options, manifest),
        "document": document,
    }


def resolve_options(flags: dict, cwd: Path | str) -> dict:
    """Read the markdown source and manifest, then merge them with the flags."""
    cwd = Path(cwd)
    frontmatter, markdown_text = _extract_frontmatter(load_markdown_source(flags, cwd))
    manifest_path = cwd / (flags.get("config") or DEFAULT_OPTIONS["config"])
    manifest = load_project_manifest(manifest_path)
    options = merge_options({**flags, "markdown": markdown_text}, manifest, frontmatter=frontmatter)
    _log(
        "DEBUG",
        "resolve",
        f"title={options['document']['title']}",
        detail=f"manifest={manifest_path if manifest else '-'} frontmatter={bool(frontmatter)}",
    )
    return options


def _previous_element(node) -> Tag | None:
    """Nearest preceding sibling element, looking past whitespace only."""
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag):
            return sibling
        if str(sibling).strip():
            return None
    return None


def _annotation_params(text: str) -> list[tuple[str, str]]:
    """Split "a=1&b=x+y" into pairs. Values are kept verbatim, not URL-decoded."""
    params = []
    for part in text.split("&"):
        key, _, value = part.partition("=")
        if key.strip():
            params.append((key.strip(), value))
    return params


def _apply_annotations(fragment: BeautifulSoup) -> int:
    """Apply <!--rehype:key=value&...--> comments as attributes. Returns count."""
    comments = fragment.find_all(
        string=lambda s: isinstance(s, Comment) and s.strip().startswith(_ANNOTATION_PREFIX)
    )
    applied = 0
    for comment in comments:
        params = _annotation_params(comment.strip()[len(_ANNOTATION_PREFIX):])
        parent = comment.parent
        lone = parent.name == "p" and all(
            node is comment or (not isinstance(node, Tag) and not str(node).strip())
            for node in parent.contents
        )
        if lone:
            target = _previous_element(parent)
            parent.decompose()
        else:
            target = _previous_element(comment)
            if target is None and not isinstance(parent, BeautifulSoup):
                target = parent
            comment.extract()
        if target is None:
            continue
        for key, value in params:
            target[key] = value
        applied += 1
    return applied


def _rewrite_urls(fragment: BeautifulSoup, reurls: dict) -> None:
    if not isinstance(reurls, dict) or not reurls:
        return
    for tag in fragment.find_all(True):
        for attr in ("href", "src"):
            if tag.get(attr) in reurls:
                tag[attr] = reurls[tag[attr]]


def _element_from_selector(soup: BeautifulSoup, selector: str) -> Tag:
    """Build an element from a simple selector like "div.note#intro"."""
    match = _SELECTOR_RE.match(selector.strip())
    assert match, f"Unsupported wrapper selector: {selector}"
    tag = soup.new_tag(match.group(1) or "div")
    classes = re.findall(r"\.([\w-]+)", match.group(2))
    ids = re.findall(r"#([\w-]+)", match.group(2))
    if classes:
        tag["class"] = classes
    if ids:
        tag["id"] = ids[-1]
    return tag


def _wrap_elements(fragment: BeautifulSoup, wrap: dict | None) -> None:
    if not isinstance(wrap, dict) or not wrap.get("selector"):
        return
    for element in fragment.select(wrap["selector"]):
        element.wrap(_element_from_selector(fragment, wrap.get("wrapper") or "div"))


def _move_contents(source, dest: Tag) -> None:
    for node in list(source.contents):
        dest.append(node.extract())


def _as_list(value: Any) -> list:
    if not value:
        return []
    return [value] if isinstance(value, str) else list(value)


def _wrap_document(fragment: BeautifulSoup, options: dict) -> BeautifulSoup:
    """Place the rendered fragment into a full HTML page."""
    document = options.get("document") or {}
    corner = options.get("github-corners") or ""
    fork = bool(options.get("github-corners-fork"))

    page = BeautifulSoup(HTML_TEMPLATE, "html.parser")
    page.html["lang"] = document.get("language") or "en"
    page.title.string = document.get("title") or ""

    for attrs in document.get("meta") or []:
        page.head.append(page.new_tag("meta", attrs={k: str(v) for k, v in attrs.items()}))
    for attrs in document.get("link") or []:
        page.head.append(page.new_tag("link", attrs={k: str(v) for k, v in attrs.items()}))
    for href in _as_list(document.get("css")):
        page.head.append(page.new_tag("link", attrs={"rel": "stylesheet", "href": href}))

    css = MARKDOWN_CSS
    if corner:
        css += RIBBON_CSS if fork else CORNER_CSS
    style = page.new_tag("style")
    style.string = css + (document.get("style") or "")
    page.head.append(style)

    if corner:
        badge = (RIBBON_HTML if fork else CORNER_HTML).format(url=html.escape(corner, quote=True))
        _move_contents(BeautifulSoup(badge, "html.parser"), page.body)

    article = page.new_tag("div", attrs={"class": "markdown-body"})
    _move_contents(fragment, article)
    page.body.append(article)

    for src in _as_list(document.get("js")):
        page.body.append(page.new_tag("script", attrs={"src": src}))
    return page


def render(options: dict) -> str:
    """Render Effective Options to an HTML page. No I/O."""
    import markdown

    md = markdown.Markdown(extensions=CONFIG["extensions"])
    fragment = BeautifulSoup(md.convert(options.get("markdown") or ""), "html.parser")

    _apply_annotations(fragment)
    _rewrite_urls(fragment, options.get("reurls") or {})
    _wrap_elements(fragment, options.get("wrap"))
    page = _wrap_document(fragment, options)

    rewrite = options.get("rewrite")
    if callable(rewrite):
        for tag in page.find_all(True):
            rewrite(tag)
    return str(page)


def _convert_impl(options: dict, cwd: Path | str | None = None) -> tuple[str, dict]:
    """Render options and write the page. CLI: (default), MCP: convert."""
    start_ms = time.time() * 1000

    cwd = Path.cwd() if cwd is None else Path(cwd)
    final_html = render(options)

    out_file = cwd / (options.get("output") or DEFAULT_OPTIONS["output"])
    try:
        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(final_html, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"Cannot write {out_file}: {e.strerror or e}") from e

    latency_ms = time.time() * 1000 - start_ms
    metrics = {
        "latency_ms": round(latency_ms, 2),
        "bytes": len(final_html.encode("utf-8")),
        "output": os.path.relpath(out_file, cwd),
    }
    return str(out_file.absolute()), metrics


def run(defaults: dict | None = None, argv: list[str] | None = None, cwd: Path | str | None = None):
    """Resolve options, render and write the page.

    Returns the version string for --version, otherwise None. --help and
    --version return before any file is touched.
    """
    argv = sys.argv[1:] if argv is None else argv
    cwd = Path.cwd() if cwd is None else Path(cwd)

    flags = parse_arguments(argv, defaults)
    if flags.get("help"):
        print(f"{CLI_HELP}{EXAMPLE_HELP}")
        _log("DEBUG", "help", "usage printed")
        return None
    if flags.get("version"):
        version = _version()
        print(f"\n {TOOL_NAME} v{version}\n")
        _log("DEBUG", "version", version)
        return version

    options = resolve_options(flags, cwd)
    result, metrics = _convert_impl(options, cwd)
    print(f"\n{TOOL_NAME}: {metrics['output']}\n")
    _log("INFO", "convert", f"output={result}", metrics=json.dumps(metrics))
    return None


# =============================================================================
# CLI INTERFACE
# =============================================================================

def _fail(event: str, e: BaseException):
    _log("ERROR", event, str(e))
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)


def main():
    argv = sys.argv[1:]
    try:
        if argv[:1] == ["mcp-stdio"]:
            _run_mcp()
        else:
            run(argv=argv)
    except argparse.ArgumentError as e:
        _fail("usage_error", e)
    except AssertionError as e:
        _fail("contract_violation", e)
    except OutputWriteError as e:
        _fail("write_failed", e)
    except FileNotFoundError as e:
        _fail("source_not_found", e)
    except json.JSONDecodeError as e:
        _fail("manifest_malformed", e)
    except OSError as e:
        _fail("read_failed", e)
    except Exception as e:
        _fail("runtime_error", e)


# =============================================================================
# FASTMCP SERVER
# =============================================================================

def _run_mcp():
    """Run as MCP server."""
    from fastmcp import FastMCP

    mcp = FastMCP("markdown-to-html")

    @mcp.tool()
    def convert(
        markdown_text: str,
        title: str = "",
        description: str = "",
        keywords: str = "",
        author: str = "",
        favicon: str = "",
        github_corners: str = "",
        github_corners_fork: bool = False,
        config_path: str = "",
        output_path: str = "",
    ) -> str:
        """Convert markdown text to a standalone HTML page.

        The project manifest in the working directory is merged in, the
        same way the CLI does it.

        Args:
            markdown_text: Markdown content to convert
            title: Page <title> (default: manifest name)
            description: Meta description
            keywords: Comma separated meta keywords
            author: Meta author
            favicon: Favicon URL
            github_corners: Repository URL for the GitHub corner
            github_corners_fork: Use the "Fork me" ribbon style
            config_path: Manifest path (default: package.json)
            output_path: Write the page here; empty returns the HTML

        Returns:
            JSON with output path (or html) and metrics
        """
        try:
            defaults = {
                "markdown": markdown_text,
                "title": title,
                "description": description,
                "keywords": keywords,
                "author": author,
                "favicon": favicon,
                "github-corners": github_corners,
                "github-corners-fork": github_corners_fork,
                "config": config_path,
            }
            flags = parse_arguments([], {k: v for k, v in defaults.items() if v})
            options = resolve_options(flags, Path.cwd())
            if not output_path:
                return json.dumps({"html": render(options)})
            result, metrics = _convert_impl({**options, "output": output_path})
            _log("INFO", "convert", f"output={result}", metrics=json.dumps(metrics))
            return json.dumps({"output": result, "metrics": metrics})
        except Exception as e:
            return json.dumps({"error": str(e)})

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
