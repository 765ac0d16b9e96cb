"""Tests for record-level orchestration and the end-to-end translation flow."""

import json
from dataclasses import dataclass
from typing import Optional

import pytest

import record_translator.services.client as client_module
from record_translator.errors import AuthenticationError, ConfigurationError
from record_translator.models import (
    FieldKind,
    OutcomeStatus,
    SkipReason,
    TranslationOptions,
    TranslationOutcome,
    translatable,
)
from record_translator.orchestration.record import RecordOrchestrator
from record_translator.services.client import ChatCompletionClient
from record_translator.services.translation_service import TranslationService
from record_translator.storage import PendingWriteBuffer, commit_pending_writes
from tests.conftest import Article, FakeClient, Page, Project, Tag, Untranslatable


@pytest.fixture
def orchestrator(translation_service, store, config, sleeps):
    return RecordOrchestrator(translation_service=translation_service, store=store, config=config, sleep=sleeps.append)


class TestBuildRequest:
    def test_discovers_declared_fields(self, orchestrator):
        request = orchestrator.build_request(Project(id=4), TranslationOptions())

        assert request.record_id == 4
        assert request.source_locale == "fr"
        assert request.target_locales == ("en", "de")
        assert request.field_names(FieldKind.SCALAR) == ["title", "summary"]
        assert request.field_names(FieldKind.RICH_TEXT) == ["context"]

    def test_rich_text_wins_on_conflict(self, orchestrator):
        request = orchestrator.build_request(Article(), TranslationOptions())

        assert request.field_names(FieldKind.SCALAR) == ["title"]
        assert request.field_names(FieldKind.RICH_TEXT) == ["description"]

    def test_unknown_fields_are_dropped(self, orchestrator):
        request = orchestrator.build_request(Project(), TranslationOptions(fields=["title", "bogus", "context"]))

        assert [f.name for f in request.fields] == ["title", "context"]

    def test_source_removed_from_targets(self, orchestrator):
        request = orchestrator.build_request(Project(), TranslationOptions(source="en", targets=["en", "fr", "fr"]))

        assert request.source_locale == "en"
        assert request.target_locales == ("fr",)


class TestTranslateRecord:
    def test_routes_fields_to_their_orchestrator(self, orchestrator, store, fake_client):
        store.upsert(1, "Article", "description", "fr", "<p>Une description</p>")
        article = Article(id=1, title_fr="Titre", description_fr="scalar copy")

        result = orchestrator.translate_record(article, {"to": ["en"]})

        assert result.scalar_outcomes == [TranslationOutcome.translated("title", "en")]
        assert result.rich_text_outcomes == [TranslationOutcome.translated("description", "en")]
        assert article.title_en == "en:Titre"
        # the scalar attribute of a rich-text field is never written
        assert article.description_en is None
        assert store.find(1, "Article", "description", "en") == "en:Une description"
        assert [c["text"] for c in fake_client.calls] == ["Titre", "Une description"]

    def test_scalar_only_record_needs_no_store(self, translation_service, config, sleeps):
        orchestrator = RecordOrchestrator(translation_service=translation_service, config=config, sleep=sleeps.append)
        tag = Tag(id=2, names={"fr": "Outil"})

        result = orchestrator.translate_record(tag, to="en")

        assert result.translated_count == 1
        assert result.rich_text_outcomes == []
        assert tag.names["en"] == "en:Outil"

    def test_rich_text_without_store_raises(self, translation_service, config, sleeps):
        orchestrator = RecordOrchestrator(translation_service=translation_service, config=config, sleep=sleeps.append)

        with pytest.raises(ConfigurationError):
            orchestrator.translate_record(Page(id=1))

    def test_missing_store_fails_before_scalar_work(self, translation_service, fake_client, config, sleeps):
        orchestrator = RecordOrchestrator(translation_service=translation_service, config=config, sleep=sleeps.append)
        project = Project(id=1, title_fr="Bonjour")

        with pytest.raises(ConfigurationError):
            orchestrator.translate_record(project, {"from": "fr", "to": ["en"]})

        assert fake_client.calls == []
        assert project.title_en is None
        assert sleeps == []

    def test_alias_overrides_replace_existing_options(self, orchestrator, fake_client):
        project = Project(title_en="Hello")
        options = TranslationOptions(source="fr", targets=["de"], fields=["title"])

        result = orchestrator.translate_record(project, options, **{"from": "en", "to": "fr"})

        assert result.outcomes == [TranslationOutcome.translated("title", "fr")]
        assert fake_client.calls[0]["source"] == "en"
        assert project.title_fr == "fr:Hello"

    def test_record_without_schema_yields_empty_result(self, orchestrator, fake_client):
        result = orchestrator.translate_record(Untranslatable(title_fr="Bonjour"))

        assert result.outcomes == []
        assert fake_client.calls == []

    def test_field_selection_limits_work(self, orchestrator, fake_client):
        project = Project(id=1, title_fr="Bonjour", summary_fr="Résumé")

        result = orchestrator.translate_record(project, TranslationOptions(targets=["en"], fields=["summary"]))

        assert result.outcomes == [TranslationOutcome.translated("summary", "en")]
        assert project.title_en is None

    def test_dict_options_with_from_and_to(self, orchestrator, fake_client):
        project = Project(title_en="Hello")

        result = orchestrator.translate_record(project, {"from": "en", "to": "de", "fields": "title"})

        assert result.outcomes == [TranslationOutcome.translated("title", "de")]
        assert fake_client.calls[0]["source"] == "en"
        assert project.title_de == "de:Hello"

    def test_force_override(self, orchestrator):
        project = Project(title_fr="Bonjour", title_en="Old")

        result = orchestrator.translate_record(project, TranslationOptions(targets=["en"], fields=["title"]), force=True)

        assert result.translated_count == 1
        assert project.title_en == "en:Bonjour"

    def test_skips_and_failures_are_aggregated(self, store, config, sleeps):
        client = FakeClient(failures={"Boom": ValueError("unexpected")})
        orchestrator = RecordOrchestrator(
            translation_service=TranslationService(client), store=store, config=config, sleep=sleeps.append
        )
        project = Project(id=3, title_fr="Boom", summary_fr=None)
        store.upsert(3, "Project", "context", "fr", "<p>Contexte</p>")

        result = orchestrator.translate_record(project, to=["en"])

        assert [(o.field, o.status) for o in result.outcomes] == [
            ("title", OutcomeStatus.FAILED),
            ("summary", OutcomeStatus.SKIPPED),
            ("context", OutcomeStatus.TRANSLATED),
        ]
        assert result.failed[0].error_kind == "ValueError"
        assert result.outcomes[1].reason == SkipReason.EMPTY_SOURCE
        assert result.to_dict()["rich_text"] == [{"field": "context", "locale": "en", "status": "translated"}]

    def test_authentication_error_becomes_failed_outcome(self, store, config, sleeps):
        client = FakeClient(failures={"Bonjour": AuthenticationError("Invalid API key", status_code=401)})
        orchestrator = RecordOrchestrator(
            translation_service=TranslationService(client), store=store, config=config, sleep=sleeps.append
        )

        result = orchestrator.translate_record(Project(title_fr="Bonjour"), to=["en", "de"])

        assert [(o.locale, o.error_kind) for o in result.failed] == [
            ("en", "AuthenticationError"),
            ("de", "AuthenticationError"),
        ]
        assert len(client.calls) == 2

    def test_new_record_flow_commits_after_save(self, orchestrator, store):
        pending = PendingWriteBuffer()
        pending.stage("context", "fr", "<p>Contexte</p>")
        project = Project(title_fr="Bonjour")

        result = orchestrator.translate_record(project, to=["en"], pending=pending)

        assert result.pending_writes is pending
        assert isinstance(result.pending_writes, PendingWriteBuffer)
        assert len(store) == 0
        project.id = 12
        commit_pending_writes(project, result.pending_writes, store)
        assert store.find(12, "Project", "context", "en") == "en:Contexte"

    def test_translate_text_pass_through(self, orchestrator):
        assert orchestrator.translate_text("Bonjour", "fr", "en") == "en:Bonjour"
        assert orchestrator.translate_text("", "fr", "en") == ""


@translatable(scalar=["title"], rich_text=["context"])
@dataclass
class Showcase:
    id: Optional[int] = None
    title_fr: Optional[str] = None
    title_en: Optional[str] = None


class _ChatResponse:
    status_code = 200
    headers = {"Content-Type": "application/json"}

    def __init__(self, content):
        self._payload = {"choices": [{"message": {"content": content}}]}
        self.text = json.dumps(self._payload)

    def json(self):
        return self._payload


def test_end_to_end_with_http_client(monkeypatch, store, config, sleeps):
    prompts = []

    def fake_post(url, headers=None, data=None, timeout=None):
        prompt = json.loads(data)["messages"][0]["content"]
        prompts.append(prompt)
        return _ChatResponse('"Hello world"' if "Bonjour le monde" in prompt else "Hello")

    monkeypatch.setattr(client_module.requests, "post", fake_post)
    config.available_locales = ["fr", "en"]
    service = TranslationService(ChatCompletionClient(config, sleep=sleeps.append))
    orchestrator = RecordOrchestrator(translation_service=service, store=store, config=config, sleep=sleeps.append)
    store.upsert(1, "Showcase", "context", "fr", "<div>Bonjour le monde</div>")
    record = Showcase(id=1, title_fr="Bonjour")

    result = orchestrator.translate_record(record, {"to": ["en"]}, context="portfolio")

    assert result.translated_count == 2
    assert record.title_en == "Hello"
    assert store.find(1, "Showcase", "context", "en") == "Hello world"
    assert all("CONTEXT: portfolio" in p for p in prompts)
    # one pacing pause per attempted field
    assert sleeps == [0.5, 0.5]
