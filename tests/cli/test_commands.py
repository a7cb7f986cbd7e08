"""Tests for CLI subcommands."""

import argparse

import pytest

from conftest import FakeCollector, FakeGateway
from cli import commands
from cli.commands import (
    build_parser,
    cmd_clean,
    cmd_config,
    cmd_export,
    cmd_list,
    cmd_menu,
    cmd_new,
    cmd_resume,
    main,
    run,
)
from plan_platform.errors import ExportError, GenerationError, NotFoundError
from plan_platform.models import SessionConfig, SessionStep
from plan_platform.user_config import load_user_config, save_user_config, UserConfig


class ScriptedCollector(FakeCollector):
    """FakeCollector plus the CLI-only prompts."""

    def __init__(self, *, idea="Todo app", api_key="sk-typed", confirm_answer=True,
                 selected=None, menu="exit", **kwargs):
        super().__init__(**kwargs)
        self.idea = idea
        self.api_key = api_key
        self.confirm_answer = confirm_answer
        self.selected = selected
        self.menu = menu
        self.confirm_prompts = []
        self.offered = None

    def ask_for_idea(self):
        return self.idea

    def ask_session_config(self, default_provider, provider=None, model=None):
        return SessionConfig(first_round_questions=2, subsequent_round_questions=2,
                             answers_per_question=2, provider=provider or default_provider, model=model)

    def select_session(self, summaries, title="Select a session to resume:"):
        self.offered = summaries
        return self.selected

    def confirm(self, prompt, default=False):
        self.confirm_prompts.append(prompt)
        return self.confirm_answer

    def ask_api_key(self, provider):
        return self.api_key

    def select_menu_action(self, actions):
        return self.menu


@pytest.fixture
def llm(monkeypatch, tmp_path):
    """Replace client creation and the gateway; exports land in tmp_path."""
    monkeypatch.chdir(tmp_path)
    gateway = FakeGateway()
    created = {}

    def _create_client(provider, api_key):
        created["provider"] = provider
        created["api_key"] = api_key
        return object()

    monkeypatch.setattr("cli.commands.create_client", _create_client)
    monkeypatch.setattr(
        commands.LLMGenerationGateway, "for_session_config",
        lambda client, provider, model=None: gateway,
    )
    return gateway, created


def _new_args(**overrides):
    values = dict(idea="Todo app", skip_questions=True, provider=None, model=None, api_key="sk-flag")
    values.update(overrides)
    return argparse.Namespace(**values)


class TestParser:
    def test_subcommands_and_defaults(self):
        parser = build_parser()
        assert parser.parse_args(["ls"]).command == "ls"
        assert parser.parse_args(["clean"]).days == 30
        assert parser.parse_args(["clean", "--days", "7", "--force"]).force is True
        args = parser.parse_args(["export", "abc12345", "--format", "both", "--only", "spec"])
        assert (args.session_id, args.format, args.only) == ("abc12345", "both", "spec")
        assert parser.parse_args(["config", "keys"]).config_action == "keys"
        assert parser.parse_args([]).command is None

    def test_new_options(self):
        args = build_parser().parse_args(["-v", "new", "--idea", "X", "--provider", "openai", "--skip-questions"])
        assert args.verbose is True
        assert args.provider == "openai"
        assert args.skip_questions is True

    def test_invalid_provider_is_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["new", "--provider", "gemini"])


class TestNew:
    @pytest.mark.asyncio
    async def test_new_session_runs_until_the_user_pauses(self, llm, store, capsys):
        collector = ScriptedCollector(confirms=[False])

        result = await cmd_new(_new_args(), collector)

        session = store.load(result.session.id)
        assert session.current_step is SessionStep.QUESTIONS_ROUND_2
        assert session.config == SessionConfig()
        assert llm[1] == {"provider": "anthropic", "api_key": "sk-flag"}
        out = capsys.readouterr().out
        assert f"Session created: {session.id}" in out
        assert f"makeaplan resume {session.id}" in out

    @pytest.mark.asyncio
    async def test_full_run_exports_to_working_directory(self, llm, tmp_path, capsys):
        collector = ScriptedCollector(export_format="both")

        result = await cmd_new(_new_args(skip_questions=False), collector)

        assert result.session.current_step is SessionStep.CONVERT_TO_JSON
        assert all(p.parent.resolve() == tmp_path.resolve() for p in result.exported_files)
        assert "EXPORT COMPLETE" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_missing_key_is_prompted_for_and_saved(self, llm):
        collector = ScriptedCollector(confirms=[False], api_key="sk-typed")

        await cmd_new(_new_args(api_key=None, provider="openai"), collector)

        assert llm[1] == {"provider": "openai", "api_key": "sk-typed"}
        assert load_user_config().openai_api_key == "sk-typed"

    @pytest.mark.asyncio
    async def test_stored_default_model_applies_to_default_provider(self, llm, store):
        save_user_config(UserConfig(default_provider="openai", default_model="o3"))

        result = await cmd_new(_new_args(), ScriptedCollector(confirms=[False]))

        assert result.session.config.provider == "openai"
        assert result.session.config.model == "o3"

    @pytest.mark.asyncio
    async def test_unknown_model_fails_before_creating_a_session(self, llm, store):
        with pytest.raises(ValueError, match="Unknown model"):
            await cmd_new(_new_args(model="nonexistent"), ScriptedCollector())
        assert store.list() == []

    @pytest.mark.asyncio
    async def test_generation_failure_prints_resume_hint(self, llm, store, capsys):
        gateway, _ = llm
        gateway.fail_on("generate_questions")

        with pytest.raises(GenerationError):
            await cmd_new(_new_args(), ScriptedCollector())

        (summary,) = store.list()
        assert summary.step is SessionStep.QUESTIONS_ROUND_1
        assert f"makeaplan resume {summary.id}" in capsys.readouterr().out


class TestResume:
    @pytest.mark.asyncio
    async def test_resume_by_id(self, llm, store, make_session):
        session = make_session(SessionStep.FINAL_WRITEUP)
        store.save(session)
        gateway, _ = llm

        result = await cmd_resume(
            argparse.Namespace(session_id=session.id, api_key="k"), ScriptedCollector(confirms=[False]),
        )

        assert gateway.called("generate_writeup") == 1
        assert result.session.current_step is SessionStep.GENERATE_FILE_STRUCTURE

    @pytest.mark.asyncio
    async def test_resume_unknown_id(self, llm):
        with pytest.raises(NotFoundError, match="Session not found: nope0000"):
            await cmd_resume(argparse.Namespace(session_id="nope0000", api_key="k"), ScriptedCollector())

    @pytest.mark.asyncio
    async def test_resume_picker_back_does_nothing(self, llm, store, make_session):
        store.save(make_session(SessionStep.QUESTIONS_ROUND_2))
        collector = ScriptedCollector(selected=None)

        result = await cmd_resume(argparse.Namespace(session_id=None, api_key="k"), collector)

        assert result is None
        assert [s.id for s in collector.offered] == ["abcd1234"]
        assert llm[0].calls == []

    @pytest.mark.asyncio
    async def test_resume_without_sessions_starts_a_new_one(self, llm, store, capsys):
        collector = ScriptedCollector(confirms=[False], idea="Fresh idea")

        result = await cmd_resume(argparse.Namespace(session_id=None, api_key="k"), collector)

        assert result.session.idea == "Fresh idea"
        assert "Starting a new session instead" in capsys.readouterr().out


class TestListExportClean:
    def test_list_prints_sessions(self, store, make_session, capsys):
        store.save(make_session(SessionStep.FINAL_WRITEUP, idea="Grocery list"))

        summaries = cmd_list(argparse.Namespace())

        out = capsys.readouterr().out
        assert len(summaries) == 1
        assert "abcd1234" in out
        assert "Writeup" in out
        assert "Grocery list" in out

    def test_list_empty(self, capsys):
        assert cmd_list(argparse.Namespace()) == []
        assert "No sessions found" in capsys.readouterr().out

    def test_export_specification_only(self, store, make_session, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        store.save(make_session(SessionStep.GENERATE_FILE_STRUCTURE))

        paths = cmd_export(
            argparse.Namespace(session_id="abcd1234", format="markdown", only="spec"), ScriptedCollector(),
        )

        assert paths[0].name == "todo-app-abcd1234-spec.md"
        assert "Exported to" in capsys.readouterr().out

    def test_export_structure_without_structure(self, store, make_session):
        store.save(make_session(SessionStep.GENERATE_FILE_STRUCTURE))
        with pytest.raises(ExportError):
            cmd_export(argparse.Namespace(session_id="abcd1234", format="json", only="structure"),
                       ScriptedCollector())

    def test_export_asks_for_format_and_session(self, store, make_session, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        store.save(make_session(SessionStep.QUESTIONS_ROUND_2))
        collector = ScriptedCollector(selected="abcd1234", export_format="json")

        paths = cmd_export(argparse.Namespace(session_id=None, format=None, only=None), collector)

        assert [p.suffix for p in paths] == [".json"]

    def _aged(self, store, make_session, session_id, days):
        store._write(make_session(session_id=session_id, age_days=days))

    def test_clean_declined_deletes_nothing(self, store, make_session, capsys):
        self._aged(store, make_session, "old00001", 45)
        collector = ScriptedCollector(confirm_answer=False)

        deleted = cmd_clean(argparse.Namespace(days=30, force=False), collector)

        assert deleted == 0
        assert store.load("old00001") is not None
        out = capsys.readouterr().out
        assert "Cancelled." in out
        assert "45 days ago" in out

    def test_clean_force_skips_confirmation(self, store, make_session):
        self._aged(store, make_session, "old00001", 45)
        self._aged(store, make_session, "new00001", 1)
        collector = ScriptedCollector()

        assert cmd_clean(argparse.Namespace(days=30, force=True), collector) == 1
        assert collector.confirm_prompts == []
        assert [s.id for s in store.list()] == ["new00001"]

    def test_clean_deletes_only_the_previewed_sessions(self, store, make_session):
        self._aged(store, make_session, "old00001", 45)
        self._aged(store, make_session, "edge0001", 29)

        class AgingCollector(ScriptedCollector):
            def confirm(self, prompt, default=False):
                # edge0001 crosses the cutoff while the prompt is open
                store._write(make_session(session_id="edge0001", age_days=31))
                return True

        deleted = cmd_clean(argparse.Namespace(days=30, force=False), AgingCollector())

        assert deleted == 1
        assert store.load("old00001") is None
        assert store.load("edge0001") is not None

    def test_clean_nothing_to_do(self, capsys):
        assert cmd_clean(argparse.Namespace(days=30, force=False), ScriptedCollector()) == 0
        assert "No sessions older than 30 day(s)" in capsys.readouterr().out


class TestConfigCommand:
    def test_show_masks_keys(self, capsys):
        save_user_config(UserConfig(anthropic_api_key="sk-ant-abcdef1234"))

        cmd_config(argparse.Namespace(config_action=None), ScriptedCollector())

        out = capsys.readouterr().out
        assert "***1234" in out
        assert "sk-ant-abcdef1234" not in out
        assert "OpenAI API key:    Not set" in out

    def test_reset(self):
        save_user_config(UserConfig(default_provider="openai"))
        cmd_config(argparse.Namespace(config_action="reset"), ScriptedCollector(confirm_answer=True))
        assert load_user_config().default_provider == "anthropic"

    def test_keys_update(self):
        collector = ScriptedCollector(menu="openai", api_key="sk-new")
        cmd_config(argparse.Namespace(config_action="keys"), collector)
        assert load_user_config().openai_api_key == "sk-new"

    def test_keys_clear(self):
        save_user_config(UserConfig(anthropic_api_key="a", openai_api_key="b"))
        cmd_config(argparse.Namespace(config_action="keys"), ScriptedCollector(menu="clear"))
        config = load_user_config()
        assert config.anthropic_api_key is None and config.openai_api_key is None


class TestMainAndMenu:
    @pytest.fixture(autouse=True)
    def _quiet_logging(self, monkeypatch):
        monkeypatch.setattr("cli.commands._setup_logging", lambda verbose=False: None)

    @pytest.mark.asyncio
    async def test_menu_exit(self, capsys):
        assert await cmd_menu(argparse.Namespace(), ScriptedCollector(menu="exit")) is None
        assert "Goodbye!" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_menu_dispatches_list(self, capsys):
        await cmd_menu(argparse.Namespace(), ScriptedCollector(menu="list"))
        assert "No sessions found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_not_found_exits_with_friendly_message(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            await main(["resume", "missing1", "--api-key", "k"])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Session not found: missing1" in out
        assert "makeaplan list" in out

    @pytest.mark.asyncio
    async def test_errors_print_one_line_and_exit_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            await main(["clean", "--days", "-3", "--force"])

        assert exc_info.value.code == 1
        assert "Error: days must be zero or positive" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_reported_on_one_line(self, monkeypatch, capsys):
        async def _broken(args, collector):
            raise RuntimeError("response had no choices")

        monkeypatch.setattr("cli.commands.dispatch", _broken)

        with pytest.raises(SystemExit) as exc_info:
            await main(["list"])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out.strip() == "Error: response had no choices"
        assert "Traceback" not in captured.out + captured.err

    def test_interrupt_exits_130(self, monkeypatch, capsys):
        def _interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        monkeypatch.setattr("cli.commands.asyncio.run", _interrupt)

        with pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 130
        assert "Progress up to the last completed step is saved" in capsys.readouterr().out
