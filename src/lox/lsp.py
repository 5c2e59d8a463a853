"""Minimal LSP server for Lox: diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from lox import __version__
from lox.errors import Issue
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH, ensure_recursion_limit
from lox.parser import Parser
from lox.resolver import Resolver
from lox.scanner import scan

server = LanguageServer("lox-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _diagnostic(issue: Issue, lines: list[str], severity: DiagnosticSeverity) -> Diagnostic:
    line = max(issue.line - 1, 0)
    text = lines[line] if line < len(lines) else ""
    stripped = text.rstrip()
    start = len(stripped) - len(stripped.lstrip())
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=start),
            end=Position(line=line, character=max(len(stripped), start + 1)),
        ),
        message=issue.message,
        severity=severity,
        source="lox",
    )


def collect_issues(source: str) -> list[tuple[Issue, DiagnosticSeverity]]:
    """Scan, parse and resolve *source* without executing it."""
    ensure_recursion_limit(DEFAULT_MAX_CALL_DEPTH)
    tokens, issues = scan(source)
    if issues:
        return [(issue, DiagnosticSeverity.Error) for issue in issues]

    statements, issues = Parser(tokens).parse()
    if issues:
        return [(issue, DiagnosticSeverity.Error) for issue in issues]

    issues = Resolver().resolve(statements)
    return [(issue, DiagnosticSeverity.Warning) for issue in issues]


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the static Lox pipeline and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    lines = source.splitlines()

    diagnostics = [
        _diagnostic(issue, lines, severity) for issue, severity in collect_issues(source)
    ]

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
