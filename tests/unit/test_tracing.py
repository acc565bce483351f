"""Unit tests for tracing spans around database operations."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from litemap.adapters.outbound import SQLiteEngine
from litemap.application.database import Database
from litemap.domain.entities import column, table_key
from litemap.infrastructure import tracing


@dataclass
class Note:
    id: int = table_key("note")
    body: str = column(default="")


@pytest.fixture
def exporter(monkeypatch: pytest.MonkeyPatch) -> InMemorySpanExporter:
    """Route spans to an in-memory exporter without touching the global provider."""
    memory = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(memory))
    monkeypatch.setattr(tracing, "_tracer", provider.get_tracer("test"))
    return memory


@pytest.mark.unit
class TestTraceSpan:
    """Tests for trace_span and the CRUD spans."""

    def test_span_attributes(self, exporter: InMemorySpanExporter) -> None:
        with tracing.trace_span("litemap.test", {"table": "note"}):
            pass

        (span,) = exporter.get_finished_spans()
        assert span.name == "litemap.test"
        assert span.attributes["table"] == "note"

    def test_crud_spans(self, exporter: InMemorySpanExporter) -> None:
        with Database.attach(SQLiteEngine.memory()) as db:
            db.create_table(Note)
            db.insert([Note(body="a"), Note(body="b")])
            found: list[Note] = []
            db.retrieve(found, Note)
            db.update(found[0], "body")
            db.delete(Note, "WHERE rowid == ?1", found[1].id)
            assert db.ok, db.error

        names = [span.name for span in exporter.get_finished_spans()]
        assert names == [
            "litemap.create_table",
            "litemap.insert",
            "litemap.retrieve",
            "litemap.update",
            "litemap.delete",
        ]
        retrieve = exporter.get_finished_spans()[2]
        assert retrieve.attributes["rows"] == 2


@pytest.mark.unit
class TestSetupTracing:
    """Tests for setup_tracing."""

    def test_returns_tracer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(tracing, "_tracer", None)

        tracer = tracing.setup_tracing(service_name="litemap-test")

        assert tracing.get_tracer() is tracer
        with tracing.trace_span("litemap.smoke") as span:
            assert span.is_recording()
