"""Minimal LSP server for SQLCMD scripts: diagnostics only."""

from __future__ import annotations

import tomllib
from pathlib import Path

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
from pygls.uris import to_fs_path

from sqlcmdpp import __version__
from sqlcmdpp.cli import config_variables, load_config
from sqlcmdpp.errors import DirectiveSyntaxError, SqlCmdError
from sqlcmdpp.preprocessor import SqlCmdPreprocessor

server = LanguageServer(
    "sqlcmdpp-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _document_dir(uri: str) -> Path:
    fs_path = to_fs_path(uri)
    if not fs_path:
        return Path(".")
    return Path(fs_path).parent


def _diagnostic(exc: SqlCmdError) -> Diagnostic:
    span = exc.origin or exc.span
    if span is None:
        rng = Range(start=Position(line=0, character=0), end=Position(line=0, character=1))
    else:
        rng = Range(
            start=Position(line=span.start.line - 1, character=span.start.column - 1),
            end=Position(line=span.end.line - 1, character=span.end.column - 1),
        )
    message = exc.message
    if len(exc.include_chain) > 1:
        message += f" (in {' -> '.join(exc.include_chain[1:])})"
    severity = (
        DiagnosticSeverity.Error
        if isinstance(exc, DirectiveSyntaxError)
        else DiagnosticSeverity.Warning
    )
    return Diagnostic(range=rng, message=message, severity=severity, source="sqlcmdpp")


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the preprocessor over the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    doc_dir = _document_dir(uri)
    diagnostics: list[Diagnostic] = []

    preprocessor = SqlCmdPreprocessor(base_dir=doc_dir)
    try:
        preprocessor.variables.update(config_variables(load_config(None, doc_dir)))
    except tomllib.TOMLDecodeError as exc:
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=0, character=0),
                    end=Position(line=0, character=0),
                ),
                message=f"invalid sqlcmdpp.toml: {exc}",
                severity=DiagnosticSeverity.Warning,
                source="sqlcmdpp",
            )
        )

    try:
        for _ in preprocessor.process(source, filename):
            pass
    except SqlCmdError as exc:
        diagnostics.append(_diagnostic(exc))

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
