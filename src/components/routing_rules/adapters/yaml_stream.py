"""
YAML document stream codec for the routing rules file.

The file holds one YAML document per rule, each starting with ``---``, with no
surrounding list.
"""

from __future__ import annotations

from typing import Any

import yaml


class YamlDocumentStreamCodec:
    """Adapter reading and writing a multi-document YAML stream."""

    def decode(self, text: str) -> list[dict[str, Any]]:
        """
        Parse every document in the stream, in order.

        Explicit empty documents (a bare ``---``) are skipped.

        Raises:
            yaml.YAMLError: If the stream is not valid YAML.
            TypeError: If a document is not a mapping.
        """
        documents: list[dict[str, Any]] = []
        for index, document in enumerate(yaml.safe_load_all(text)):
            if document is None:
                continue
            if not isinstance(document, dict):
                raise TypeError(
                    f"document {index} must be a mapping, got {type(document).__name__}"
                )
            documents.append(document)
        return documents

    def encode(self, documents: list[dict[str, Any]]) -> str:
        """Serialise documents to a YAML stream (empty string for no documents)."""
        if not documents:
            return ""
        return yaml.safe_dump_all(
            documents,
            explicit_start=True,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )


default_codec = YamlDocumentStreamCodec()
