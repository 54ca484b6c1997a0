"""Integration tests for the full ingestion pipeline.

Wires the real extractor, chunker, SQLite repositories and in-memory vector
store together with the deterministic bag-of-words embedding fake and a
scripted LLM, then checks what ends up persisted.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import fitz
import pytest
import structlog

from tests.conftest import FakeEmbeddingProvider, ScriptedLLM
from vacancy_rag.main import build_services, initialize_storage
from vacancy_rag.models.document import DocumentStatus
from vacancy_rag.models.position import QuestionOutcome, SummaryStatus
from vacancy_rag.utils.errors import (
    EmbeddingError,
    ExtractionError,
    RepositoryError,
    SynthesisError,
)

TEXT_MIME = "text/plain"


def _posting(length: int) -> str:
    """Distinct, word-tokenisable text of exactly *length* characters."""
    words = " ".join(f"tok{i:04d}" for i in range(length // 8 + 2))
    return words[:length]


async def _pipeline(test_settings, embedding=None, llm=None):
    components = build_services(
        test_settings,
        embedding_provider=embedding or FakeEmbeddingProvider(),
        llm=llm or ScriptedLLM(summary="Build our hiring platform."),
    )
    await initialize_storage(components)
    await components["position_repository"].upsert_position("pos-1", "Backend Engineer")
    await components["position_repository"].upsert_position("pos-2", "Designer")
    return components


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_three_chunks_and_search(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        text = _posting(2500)

        result = await c["ingestion_service"].ingest(
            text.encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
        )

        assert result.chunk_count == 3
        assert result.status == DocumentStatus.READY
        document = await c["document_repository"].get_document(result.document_id)
        assert document.chunk_count == 3
        assert document.status == DocumentStatus.READY
        assert document.content == text

        chunks = await c["vector_store"].list_chunks(result.document_id)
        assert [ch.sequence for ch in chunks] == [0, 1, 2]
        assert chunks[1].content == text[800:1800]
        assert {ch.embedding_model for ch in chunks} == {"fake-bow-512"}

        matches = await c["search_service"].search("pos-1", text[1000:1600], top_k=3)
        assert matches[0].sequence == 1
        assert matches[0].document_id == result.document_id

    @pytest.mark.asyncio
    async def test_preview_is_bounded(self, test_settings) -> None:
        settings = test_settings.model_copy(update={"document_preview_chars": 100})
        c = await _pipeline(settings)
        result = await c["ingestion_service"].ingest(
            _posting(1500).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
        )
        document = await c["document_repository"].get_document(result.document_id)
        assert document.content == _posting(1500)[:100]

    @pytest.mark.asyncio
    async def test_pdf_upload(self, test_settings) -> None:
        pdf = fitz.open()
        pdf.new_page().insert_text((72, 72), "Staff engineer for payments infrastructure")
        data = pdf.tobytes()
        pdf.close()

        c = await _pipeline(test_settings)
        result = await c["ingestion_service"].ingest(data, "role.pdf", "application/pdf", "pos-1")

        assert result.chunk_count == 1
        matches = await c["search_service"].search("pos-1", "payments infrastructure")
        assert "payments" in matches[0].content

    @pytest.mark.asyncio
    async def test_training_params_persisted(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        result = await c["ingestion_service"].ingest(
            b"short posting", "role.txt", TEXT_MIME, "pos-1", params={"weight": 3}
        )
        document = await c["document_repository"].get_document(result.document_id)
        assert document.training_params == {"weight": 3}

    @pytest.mark.asyncio
    async def test_documents_listed_newest_first(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        first = await c["ingestion_service"].ingest(b"first", "a.txt", TEXT_MIME, "pos-1")
        second = await c["ingestion_service"].ingest(b"second", "b.txt", TEXT_MIME, "pos-1")

        docs = await c["document_repository"].list_documents("pos-1")
        assert [d.document_id for d in docs] == [second.document_id, first.document_id]


class TestScoping:
    @pytest.mark.asyncio
    async def test_search_never_crosses_positions(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        await c["ingestion_service"].ingest(
            b"python asyncio postgres", "be.txt", TEXT_MIME, "pos-1", run_synthesis=False
        )
        await c["ingestion_service"].ingest(
            b"figma typography prototypes", "ux.txt", TEXT_MIME, "pos-2", run_synthesis=False
        )

        for_designer = await c["search_service"].search("pos-2", "python asyncio postgres")
        assert len(for_designer) == 1
        assert "figma" in for_designer[0].content

    @pytest.mark.asyncio
    async def test_chunks_from_other_model_ignored(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        await c["ingestion_service"].ingest(b"python services", "a.txt", TEXT_MIME, "pos-1")

        other_model = FakeEmbeddingProvider(model_name="fake-bow-v2")
        later = build_services(
            test_settings,
            embedding_provider=other_model,
            llm=ScriptedLLM(),
            vector_store=c["vector_store"],
        )
        assert await later["search_service"].search("pos-1", "python services") == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_corrupt_pdf_creates_nothing(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        with pytest.raises(ExtractionError):
            await c["ingestion_service"].ingest(
                b"%PDF-1.4 garbage", "bad.pdf", "application/pdf", "pos-1"
            )
        assert await c["document_repository"].list_documents("pos-1") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", [b"", b"  \n\t "])
    async def test_blank_upload_gives_empty_document(self, test_settings, blank) -> None:
        embedding = FakeEmbeddingProvider()
        llm = ScriptedLLM(summary="Build our hiring platform.")
        c = await _pipeline(test_settings, embedding=embedding, llm=llm)

        result = await c["ingestion_service"].ingest(blank, "empty.txt", TEXT_MIME, "pos-1")

        assert result.chunk_count == 0
        assert result.synthesis is not None
        assert embedding.calls == []
        document = await c["document_repository"].get_document(result.document_id)
        assert document.status == DocumentStatus.READY
        assert document.chunk_count == 0
        assert await c["vector_store"].list_chunks(result.document_id) == []
        assert len(llm.calls) == 2

    @pytest.mark.asyncio
    async def test_extraction_timeout(self, test_settings) -> None:
        settings = test_settings.model_copy(update={"extraction_timeout_seconds": 0.05})
        c = await _pipeline(settings)
        service = c["ingestion_service"]

        def _slow_extract(buffer, mime_type, file_name=""):
            import time

            time.sleep(0.5)
            return "never returned in time"

        service._extractor.extract = _slow_extract
        with pytest.raises(ExtractionError, match="timed out"):
            await service.ingest(b"x", "slow.txt", TEXT_MIME, "pos-1")
        await asyncio.sleep(0.5)
        assert await c["document_repository"].list_documents("pos-1") == []

    @pytest.mark.asyncio
    async def test_embedding_failure_leaves_partial_document(self, test_settings) -> None:
        embedding = FakeEmbeddingProvider(fail_on_call=2)
        c = await _pipeline(test_settings, embedding=embedding)

        with pytest.raises(EmbeddingError):
            await c["ingestion_service"].ingest(
                _posting(4000).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
            )

        [document] = await c["document_repository"].list_documents("pos-1")
        assert document.status == DocumentStatus.PARTIAL
        assert document.chunk_count is None
        chunks = await c["vector_store"].list_chunks(document.document_id)
        assert [ch.sequence for ch in chunks] == [0]
        assert len(embedding.calls) == 2

    @pytest.mark.asyncio
    async def test_chunk_count_write_failure_marks_partial(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        c["document_repository"].set_chunk_count = AsyncMock(
            side_effect=RepositoryError(message="database is locked")
        )

        with pytest.raises(RepositoryError):
            await c["ingestion_service"].ingest(
                _posting(1500).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
            )

        [document] = await c["document_repository"].list_documents("pos-1")
        assert document.status == DocumentStatus.PARTIAL
        assert document.chunk_count is None
        assert len(await c["vector_store"].list_chunks(document.document_id)) == 2

    @pytest.mark.asyncio
    async def test_unexpected_store_error_marks_partial(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        c["vector_store"].append_chunk = AsyncMock(side_effect=RuntimeError("index closed"))

        with pytest.raises(RuntimeError, match="index closed"):
            await c["ingestion_service"].ingest(
                _posting(1500).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
            )

        [document] = await c["document_repository"].list_documents("pos-1")
        assert document.status == DocumentStatus.PARTIAL
        assert document.chunk_count is None


class TestSynthesis:
    @pytest.mark.asyncio
    async def test_summary_and_questions_written(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        result = await c["ingestion_service"].ingest(
            _posting(1200).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
        )

        assert result.synthesis is not None
        assert result.synthesis.summary_status == SummaryStatus.OK
        assert result.synthesis.questions_status == QuestionOutcome.OK
        position = await c["position_repository"].get_position("pos-1")
        assert position.description == "Build our hiring platform."
        assert len(position.phase2_questions) == 10

    @pytest.mark.asyncio
    async def test_llm_outage_does_not_fail_ingestion(self, test_settings, failing_llm) -> None:
        c = await _pipeline(test_settings, llm=failing_llm)
        result = await c["ingestion_service"].ingest(
            b"a posting", "role.txt", TEXT_MIME, "pos-1"
        )

        assert result.chunk_count == 1
        assert result.synthesis.questions_status == QuestionOutcome.FALLBACK
        position = await c["position_repository"].get_position("pos-1")
        assert position.description is None
        assert all(q.skill == "general" for q in position.phase2_questions)

    @pytest.mark.asyncio
    async def test_synthesis_crash_is_contained(self, test_settings) -> None:
        c = await _pipeline(test_settings)
        # Position never created, so the synthesizer's write fails.
        result = await c["ingestion_service"].ingest(
            b"a posting", "role.txt", TEXT_MIME, "pos-unknown"
        )

        assert result.synthesis is None
        document = await c["document_repository"].get_document(result.document_id)
        assert document.status == DocumentStatus.READY
        assert document.chunk_count == 1

    @pytest.mark.asyncio
    async def test_run_synthesis_false_skips_llm(self, test_settings) -> None:
        llm = ScriptedLLM(summary=SynthesisError(message="should not be called"))
        c = await _pipeline(test_settings, llm=llm)
        result = await c["ingestion_service"].ingest(
            b"a posting", "role.txt", TEXT_MIME, "pos-1", run_synthesis=False
        )
        assert result.synthesis is None
        assert llm.calls == []


class TestLogContext:
    @pytest.mark.asyncio
    async def test_pipeline_events_carry_ids(self, test_settings, log_entries) -> None:
        c = await _pipeline(test_settings)
        result = await c["ingestion_service"].ingest(
            _posting(1200).encode("utf-8"), "role.txt", TEXT_MIME, "pos-1"
        )

        by_event = {entry["event"]: entry for entry in log_entries}
        for event in ("text_extracted", "ingestion_complete", "position_synthesized"):
            assert by_event[event]["position_id"] == "pos-1"
        assert by_event["ingestion_complete"]["document_id"] == result.document_id
        assert by_event["position_synthesized"]["document_id"] == result.document_id
        assert "document_id" not in by_event["text_extracted"]
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_failure_event_carries_ids(self, test_settings, log_entries) -> None:
        c = await _pipeline(test_settings, embedding=FakeEmbeddingProvider(fail_on_call=1))
        with pytest.raises(EmbeddingError):
            await c["ingestion_service"].ingest(
                b"a posting", "role.txt", TEXT_MIME, "pos-2"
            )

        [partial] = [e for e in log_entries if e["event"] == "ingestion_partial"]
        assert partial["position_id"] == "pos-2"
        assert partial["document_id"]
        assert partial["persisted"] == 0
