"""Unit tests for the streaming export pipeline."""
from __future__ import annotations

import asyncio
import io
import json
import os
from typing import Any

import openpyxl
import pytest
import structlog

from sheet_export.application.export import (
    COMPACT_EVERY,
    BufferDestination,
    ExportPipeline,
    HeaderSet,
    PipelineState,
    XlsxSheetWriter,
)
from sheet_export.kernel.errors import (
    DisconnectError,
    EncodingError,
    ExportError,
    PipelineStateError,
    RetrievalError,
    SerializationError,
)
from sheet_export.testing.fakes import InMemoryCursor, RecordingSheetWriter


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------
class _ScriptedDestination(BufferDestination):
    """Answers liveness checks from a script; live once the script runs out."""

    def __init__(self, answers: list[bool]) -> None:
        super().__init__()
        self._answers = list(answers)
        self.checks = 0

    def is_live(self) -> bool:
        self.checks += 1
        return self._answers.pop(0) if self._answers else True


class _FailingOpenDestination(BufferDestination):
    def open(self):
        raise PermissionError("read-only filesystem")


def _pipeline(
    batches: list[list[Any]],
    *,
    columns: list[str] | None = None,
    append_header: bool = True,
    first_scan: bool = False,
    writer: RecordingSheetWriter | None = None,
    destination: BufferDestination | None = None,
    **cursor_kwargs: Any,
) -> tuple[ExportPipeline, InMemoryCursor, RecordingSheetWriter, BufferDestination]:
    cursor = InMemoryCursor(batches, **cursor_kwargs)
    writer = writer or RecordingSheetWriter()
    destination = destination or BufferDestination()
    pipeline = ExportPipeline(
        cursor,
        HeaderSet(columns or []),
        writer,
        destination,
        append_header=append_header,
        first_scan=first_scan,
    )
    return pipeline, cursor, writer, destination


def _output_rows(destination: BufferDestination) -> list[list[str]]:
    return [json.loads(line) for line in destination.getvalue().decode("utf-8").splitlines()]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------
class TestScenarios:
    def test_discovered_header_with_nested_record(self) -> None:
        pipeline, _, writer, destination = _pipeline([[{"a": "1", "b": {"c": "2"}}]])
        result = asyncio.run(pipeline.run())
        assert writer.rows == [["a", "b.c"], ["1", "2"]]
        assert _output_rows(destination) == [["a", "b.c"], ["1", "2"]]
        assert result.rows == 1
        assert result.columns == ("a", "b.c")
        assert result.header_written is True

    def test_fixed_columns_with_blank_value(self) -> None:
        pipeline, _, writer, _ = _pipeline([[{"a": ""}]], columns=["a", "x"])
        asyncio.run(pipeline.run())
        assert writer.rows == [["a", "x"], ["-", "-"]]

    def test_empty_first_batch_fixed_columns_writes_header_only(self) -> None:
        pipeline, _, writer, destination = _pipeline([[]], columns=["a"])
        result = asyncio.run(pipeline.run())
        assert writer.rows == [["a"]]
        assert _output_rows(destination) == [["a"]]
        assert result.rows == 0
        assert result.header_written is True

    def test_empty_first_batch_without_header_writes_empty_artifact(self) -> None:
        pipeline, _, writer, destination = _pipeline([[]], columns=["a"], append_header=False)
        asyncio.run(pipeline.run())
        assert writer.rows == []
        assert destination.written
        assert destination.getvalue() == b""

    def test_empty_first_batch_discovered_mode_has_no_header(self) -> None:
        pipeline, _, writer, destination = _pipeline([[]])
        result = asyncio.run(pipeline.run())
        assert writer.rows == []
        assert destination.written
        assert result.header_written is False


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------
class TestHeaderBehaviour:
    def test_header_frozen_at_first_record(self) -> None:
        batches = [[{"a": 1}, {"a": 2, "b": 3}], [{"c": 4}]]
        pipeline, _, writer, _ = _pipeline(batches)
        result = asyncio.run(pipeline.run())
        assert result.columns == ("a",)
        assert writer.rows == [["a"], ["1"], ["2"], ["-"]]
        assert pipeline.header.observed() == ("a", "b", "c")

    def test_fixed_columns_ignore_record_keys(self) -> None:
        batches = [[{"z": 1, "b": 2}], [{"a": 3, "y": 4}]]
        pipeline, _, writer, _ = _pipeline(batches, columns=["a", "b"])
        result = asyncio.run(pipeline.run())
        assert result.columns == ("a", "b")
        assert writer.rows == [["a", "b"], ["-", "2"], ["3", "-"]]

    def test_header_written_once_before_all_data_rows(self) -> None:
        batches = [[{"a": i} for i in range(3)], [{"a": i} for i in range(3, 5)]]
        pipeline, _, writer, _ = _pipeline(batches)
        asyncio.run(pipeline.run())
        assert writer.rows[0] == ["a"]
        assert [r for r in writer.rows if r == ["a"]] == [["a"]]
        assert writer.indices == list(range(6))

    def test_without_header_rows_start_at_zero(self) -> None:
        pipeline, _, writer, _ = _pipeline([[{"a": 1}, {"a": 2}]], append_header=False)
        result = asyncio.run(pipeline.run())
        assert writer.indices == [0, 1]
        assert writer.rows == [["1"], ["2"]]
        assert result.header_written is False
        assert result.columns == ("a",)

    def test_every_row_has_header_width(self) -> None:
        batches = [[{"a": 1}, {"b": {"c": 2}}, {}], [{"a": 3, "d": [1, 2]}]]
        pipeline, _, writer, _ = _pipeline(batches, columns=["a", "b.c", "d"])
        asyncio.run(pipeline.run())
        assert all(len(row) == 3 for row in writer.rows)


# ---------------------------------------------------------------------------
# Termination
# ---------------------------------------------------------------------------
class TestTermination:
    def test_n_batches_then_empty_page(self) -> None:
        batches = [[{"a": 1}], [{"a": 2}, {"a": 3}], [{"a": 4}], []]
        pipeline, cursor, writer, _ = _pipeline(batches)
        result = asyncio.run(pipeline.run())
        assert result.retrieval_steps == 4
        assert cursor.advance_calls == ["scroll-1", "scroll-2", "scroll-3"]
        assert result.rows == 4
        assert len(writer.rows) == 5

    def test_empty_batch_with_token_is_end_of_results(self) -> None:
        pipeline, cursor, _, destination = _pipeline(
            [[{"a": 1}], []], final_scroll_id="still-open"
        )
        result = asyncio.run(pipeline.run())
        assert cursor.advance_calls == ["scroll-1"]
        assert result.rows == 1
        assert destination.written

    def test_missing_token_stops_without_advancing(self) -> None:
        pipeline, cursor, _, _ = _pipeline([[{"a": 1}], [{"a": 2}]])
        result = asyncio.run(pipeline.run())
        assert cursor.advance_calls == ["scroll-1"]
        assert result.retrieval_steps == 2
        assert result.batches == 2

    def test_finalizes_exactly_once(self) -> None:
        pipeline, _, writer, destination = _pipeline([[{"a": 1}], [{"a": 2}], []])
        asyncio.run(pipeline.run())
        assert writer.serialize_calls == 1
        assert destination.opened == 1
        assert writer.released
        assert pipeline.state.phase is PipelineState.DONE
        assert pipeline.state.terminal

    def test_many_batches_loop_without_recursion(self) -> None:
        batches = [[{"a": i}] for i in range(3000)] + [[]]
        pipeline, _, _, _ = _pipeline(batches, columns=["a"])
        result = asyncio.run(pipeline.run())
        assert result.rows == 3000
        assert result.retrieval_steps == 3001

    def test_cannot_run_twice(self) -> None:
        pipeline, _, _, _ = _pipeline([[{"a": 1}]])
        asyncio.run(pipeline.run())
        with pytest.raises(PipelineStateError):
            asyncio.run(pipeline.run())


# ---------------------------------------------------------------------------
# Compaction
# ---------------------------------------------------------------------------
class TestCompaction:
    def test_compacts_every_thousand_data_rows(self) -> None:
        batch = [{"a": i} for i in range(2 * COMPACT_EVERY + 500)]
        pipeline, _, writer, _ = _pipeline([batch])
        asyncio.run(pipeline.run())
        assert writer.compact_calls == 2
        # header row plus the data rows appended so far
        assert writer.compacted_at == [COMPACT_EVERY + 1, 2 * COMPACT_EVERY + 1]

    def test_counter_spans_batches(self) -> None:
        half = COMPACT_EVERY // 2
        batches = [[{"a": i} for i in range(half)], [{"a": i} for i in range(half)]]
        pipeline, _, writer, _ = _pipeline(batches, append_header=False)
        asyncio.run(pipeline.run())
        assert writer.compact_calls == 1

    def test_small_export_never_compacts(self) -> None:
        pipeline, _, writer, _ = _pipeline([[{"a": 1}]])
        asyncio.run(pipeline.run())
        assert writer.compact_calls == 0


# ---------------------------------------------------------------------------
# Disconnect
# ---------------------------------------------------------------------------
class TestDisconnect:
    def test_disconnected_before_first_batch(self) -> None:
        destination = _ScriptedDestination([False])
        pipeline, cursor, writer, _ = _pipeline([[{"a": 1}], [{"a": 2}]], destination=destination)
        with pytest.raises(DisconnectError):
            asyncio.run(pipeline.run())
        assert writer.rows == []
        assert cursor.advance_calls == []
        assert destination.opened == 0
        assert writer.released
        assert pipeline.state.phase is PipelineState.FAILED

    def test_disconnect_at_later_boundary_stops_retrieval(self) -> None:
        destination = _ScriptedDestination([True, True, False])
        batches = [[{"a": 1}], [{"a": 2}], [{"a": 3}], [{"a": 4}]]
        pipeline, cursor, writer, _ = _pipeline(batches, destination=destination)
        with pytest.raises(DisconnectError) as exc_info:
            asyncio.run(pipeline.run())
        assert writer.rows == [["a"], ["1"], ["2"]]
        assert cursor.advance_calls == ["scroll-1", "scroll-2"]
        assert destination.checks == 3
        assert not destination.written
        assert exc_info.value.output_may_be_incomplete is False

    def test_liveness_checked_once_per_batch(self) -> None:
        destination = _ScriptedDestination([])
        batches = [[{"a": i} for i in range(10)], [{"a": 1}], []]
        pipeline, _, _, _ = _pipeline(batches, destination=destination)
        asyncio.run(pipeline.run())
        assert destination.checks == 3

    def test_failing_probe_counts_as_disconnect(self) -> None:
        class _Broken(BufferDestination):
            def is_live(self) -> bool:
                raise OSError("socket closed")

        pipeline, _, _, _ = _pipeline([[{"a": 1}]], destination=_Broken())
        with pytest.raises(DisconnectError) as exc_info:
            asyncio.run(pipeline.run())
        assert isinstance(exc_info.value.cause, OSError)


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------
class TestFailures:
    def test_retrieval_failure_wraps_cause(self) -> None:
        pipeline, cursor, writer, destination = _pipeline(
            [[{"a": 1}], [{"a": 2}]], fail_on_advance=1
        )
        with pytest.raises(RetrievalError) as exc_info:
            asyncio.run(pipeline.run())
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert exc_info.value.detail == {"scroll_id": "scroll-1"}
        assert writer.released
        assert not destination.written

    def test_first_page_failure_is_retrieval_error(self) -> None:
        class _Broken(InMemoryCursor):
            def current(self):
                raise TimeoutError("search timed out")

        writer = RecordingSheetWriter()
        pipeline = ExportPipeline(_Broken([]), HeaderSet(), writer, BufferDestination())
        with pytest.raises(RetrievalError):
            asyncio.run(pipeline.run())
        assert writer.released

    def test_malformed_record_is_encoding_error(self) -> None:
        pipeline, cursor, writer, destination = _pipeline([[{"a": 1}, ["not", "a", "map"]], [{"a": 3}]])
        with pytest.raises(EncodingError) as exc_info:
            asyncio.run(pipeline.run())
        assert isinstance(exc_info.value.cause, TypeError)
        assert "record 2" in exc_info.value.message
        assert cursor.advance_calls == []
        assert writer.released
        assert not destination.written

    def test_row_append_failure_is_encoding_error(self) -> None:
        writer = RecordingSheetWriter(fail_on="create_row")
        pipeline, _, _, _ = _pipeline([[{"a": 1}]], writer=writer)
        with pytest.raises(EncodingError) as exc_info:
            asyncio.run(pipeline.run())
        assert isinstance(exc_info.value.cause, OSError)

    def test_serialization_failure_still_releases(self) -> None:
        writer = RecordingSheetWriter(fail_on="serialize")
        pipeline, _, _, destination = _pipeline([[{"a": 1}]], writer=writer)
        with pytest.raises(SerializationError) as exc_info:
            asyncio.run(pipeline.run())
        assert exc_info.value.output_may_be_incomplete is True
        assert writer.released
        assert destination.opened == 1
        assert pipeline.state.phase is PipelineState.FAILED

    def test_open_failure_is_serialization_error(self) -> None:
        writer = RecordingSheetWriter()
        pipeline, _, _, _ = _pipeline([[{"a": 1}]], writer=writer, destination=_FailingOpenDestination())
        with pytest.raises(SerializationError) as exc_info:
            asyncio.run(pipeline.run())
        assert isinstance(exc_info.value.cause, PermissionError)
        assert writer.released

    def test_all_failures_share_export_error(self) -> None:
        pipeline, _, _, _ = _pipeline([[{"a": 1}], [{"a": 2}]], fail_on_advance=1)
        with pytest.raises(ExportError):
            asyncio.run(pipeline.run())

    def test_cancellation_releases_writer(self) -> None:
        class _Hanging(InMemoryCursor):
            async def advance(self, scroll_id):
                await asyncio.sleep(3600)

        async def _run() -> None:
            writer = RecordingSheetWriter()
            pipeline = ExportPipeline(
                _Hanging([[{"a": 1}], [{"a": 2}]]), HeaderSet(), writer, BufferDestination()
            )
            task = asyncio.create_task(pipeline.run())
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            assert writer.released
            assert pipeline.state.phase is PipelineState.FAILED

        asyncio.run(_run())


# ---------------------------------------------------------------------------
# Spreadsheet output
# ---------------------------------------------------------------------------
class TestXlsxOutput:
    def test_formula_and_error_text_stays_literal(self) -> None:
        writer = XlsxSheetWriter()
        pipeline, _, _, destination = _pipeline(
            [[{"=SUM(A1)": "=1+1", "b": "#N/A"}]], writer=writer
        )
        asyncio.run(pipeline.run())
        wb = openpyxl.load_workbook(io.BytesIO(destination.getvalue()))
        rows = [[(c.value, c.data_type) for c in row] for row in wb.worksheets[0].iter_rows()]
        wb.close()
        assert rows == [
            [("=SUM(A1)", "s"), ("b", "s")],
            [("=1+1", "s"), ("#N/A", "s")],
        ]

    def test_disconnect_after_compaction_removes_spool(self) -> None:
        writer = XlsxSheetWriter()
        first = [{"n": str(i)} for i in range(COMPACT_EVERY)]
        pipeline, _, _, destination = _pipeline(
            [first, [{"n": "last"}]],
            writer=writer,
            destination=_ScriptedDestination([True, False]),
        )
        with pytest.raises(DisconnectError):
            asyncio.run(pipeline.run())
        assert writer.streamed_rows == COMPACT_EVERY + 1
        assert writer.spool_path is not None
        assert not os.path.exists(writer.spool_path)
        assert not destination.written


# ---------------------------------------------------------------------------
# First scan
# ---------------------------------------------------------------------------
class TestFirstScan:
    def test_priming_page_is_skipped(self) -> None:
        batches = [[{"ignored": True}], [{"a": 1}], [{"a": 2}]]
        pipeline, cursor, writer, _ = _pipeline(batches, first_scan=True)
        result = asyncio.run(pipeline.run())
        assert writer.rows == [["a"], ["1"], ["2"]]
        assert cursor.advance_calls == ["scroll-1", "scroll-2"]
        assert result.retrieval_steps == 3
        assert result.batches == 2

    def test_priming_page_without_scroll_id(self) -> None:
        pipeline, _, writer, _ = _pipeline([[]], first_scan=True)
        with pytest.raises(RetrievalError):
            asyncio.run(pipeline.run())
        assert writer.released

    def test_priming_page_checks_liveness(self) -> None:
        destination = _ScriptedDestination([False])
        pipeline, cursor, _, _ = _pipeline([[], [{"a": 1}]], first_scan=True, destination=destination)
        with pytest.raises(DisconnectError):
            asyncio.run(pipeline.run())
        assert cursor.advance_calls == []


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
class TestLogging:
    def test_batch_and_finalize_events(self) -> None:
        pipeline, _, _, _ = _pipeline([[{"a": 1}, {"a": 2}], []])
        with structlog.testing.capture_logs() as logs:
            asyncio.run(pipeline.run())
        batches = [e for e in logs if e["event"] == "export.batch"]
        assert [(e["hits"], e["current"]) for e in batches] == [(2, 2), (0, 2)]
        assert batches[0]["scroll_id"] == "scroll-1"
        finalized = [e for e in logs if e["event"] == "export.finalized"]
        assert finalized[0]["rows"] == 2

    def test_failure_event(self) -> None:
        pipeline, _, _, _ = _pipeline([[{"a": 1}]], destination=_ScriptedDestination([False]))
        with structlog.testing.capture_logs() as logs:
            with pytest.raises(DisconnectError):
                asyncio.run(pipeline.run())
        failed = [e for e in logs if e["event"] == "export.failed"]
        assert failed[0]["code"] == "disconnected"
        assert failed[0]["log_level"] == "warning"
