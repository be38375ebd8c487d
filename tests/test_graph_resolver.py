"""Tests for the dependency graph resolver."""

import json
import os

import pytest

from bz_cli.deps.graph_resolver import DependencyGraphResolver, ROOT_COORD
from bz_cli.deps.resolvers.local_dev_resolver import LocalDevResolver
from bz_cli.errors import (
    CircularDependencyError,
    DownloadError,
    ExtractionError,
    LockFileReadError,
    TriggerError,
    UnresolvableCoordinateError,
)
from tests.fakes import FakeExtractor, FakeResolver, FakeTriggerRunner, lock_doc

TOOL = "github.com/acme/tool"
LIB = "github.com/acme/lib"


def _write_config(project_dir, deps, **extra):
    data = {"deps": deps}
    data.update(extra)
    path = project_dir / ".bz.json"
    path.write_text(json.dumps(data))
    return path


def _make_lock_newer(project_dir):
    lock = project_dir / ".bz.lock"
    config = project_dir / ".bz.json"
    stat = os.stat(config)
    os.utime(lock, (stat.st_atime + 10, stat.st_mtime + 10))


class TestResolveFromConfig:
    """Test resolution when no lock file exists."""

    def test_resolves_tree_and_writes_lock(self, project_dir, make_app_context):
        _write_config(project_dir, [f"{TOOL}@1.*"], env={"FOO": "bar"})
        resolver = FakeResolver(
            versions={TOOL: "1.2.0", LIB: "0.3.0"},
            packages={
                TOOL: lock_doc(deps=[("github.com", "acme", "lib", "0.3.0")]),
                LIB: lock_doc(env={"LIB": "yes"}),
            },
        )
        app_context = make_app_context([resolver])

        root = DependencyGraphResolver(app_context).resolve(str(project_dir))

        assert root.coord == ROOT_COORD
        assert root.dir == str(project_dir)
        assert root.exports == {"FOO": "bar"}
        assert [str(child.coord) for child in root.sub] == ["github.com/acme/tool@1.2.0"]
        tool = root.sub[0]
        assert tool.dir == os.path.join(app_context.cache_dir, "deps", "github.com", "acme", "tool", "v1.2.0", "extracted")
        assert [str(child.coord) for child in tool.sub] == ["github.com/acme/lib@0.3.0"]
        assert tool.sub[0].exports == {"LIB": "yes"}

        lock = json.loads((project_dir / ".bz.lock").read_text())
        assert lock["deps"] == [{"server": "github.com", "owner": "acme", "repo": "tool", "version": "1.2.0"}]
        assert lock["env"] == {"FOO": "bar"}

    def test_project_without_config_is_empty(self, project_dir, make_app_context):
        root = DependencyGraphResolver(make_app_context([FakeResolver({})])).resolve(str(project_dir))
        assert root.sub == ()
        assert root.bin_dir_or_default() == os.path.join(str(project_dir), "bin")

    def test_unresolvable_dependency(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        app_context = make_app_context([FakeResolver({}), LocalDevResolver()])
        with pytest.raises(UnresolvableCoordinateError):
            DependencyGraphResolver(app_context).resolve(str(project_dir))

    def test_first_resolver_returning_a_coord_wins(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        skipping = FakeResolver({})
        first = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        second = FakeResolver({TOOL: "2.0.0"}, {TOOL: lock_doc()})

        root = DependencyGraphResolver(make_app_context([skipping, first, second])).resolve(str(project_dir))

        assert str(root.sub[0].coord.version) == "1.0.0"
        assert len(skipping.resolve_calls) == 1
        assert second.resolve_calls == []

    def test_resolver_error_propagates(self, project_dir, make_app_context):
        class Failing(FakeResolver):
            def resolve_coord(self, coord):
                raise UnresolvableCoordinateError(coord, "boom")

        _write_config(project_dir, [TOOL])
        later = FakeResolver({TOOL: "1.0.0"})
        with pytest.raises(UnresolvableCoordinateError):
            DependencyGraphResolver(make_app_context([Failing({}), later])).resolve(str(project_dir))
        assert later.resolve_calls == []


class TestLockFile:
    """Test the lock-or-config decision and persistence."""

    def test_round_trip_uses_lock_without_resolving(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc(alias={"t": "tool"})})
        app_context = make_app_context([resolver])
        first = DependencyGraphResolver(app_context).resolve(str(project_dir))
        _make_lock_newer(project_dir)
        resolver.resolve_calls.clear()

        second = DependencyGraphResolver(app_context).resolve(str(project_dir))

        assert resolver.resolve_calls == []
        assert second == first

    def test_newer_config_is_re_resolved(self, project_dir, make_app_context):
        config = _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        app_context = make_app_context([resolver])
        DependencyGraphResolver(app_context).resolve(str(project_dir))

        lock_stat = os.stat(project_dir / ".bz.lock")
        os.utime(config, (lock_stat.st_atime + 10, lock_stat.st_mtime + 10))
        resolver.resolve_calls.clear()
        DependencyGraphResolver(app_context).resolve(str(project_dir))

        assert len(resolver.resolve_calls) == 1

    def test_corrupt_lock_falls_back_to_config(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        (project_dir / ".bz.lock").write_text("{broken")
        _make_lock_newer(project_dir)
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})

        root = DependencyGraphResolver(make_app_context([resolver])).resolve(str(project_dir))

        assert len(root.sub) == 1
        assert json.loads((project_dir / ".bz.lock").read_text())["deps"][0]["repo"] == "tool"

    def test_lock_write_failure_is_not_fatal(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        (project_dir / ".bz.lock").mkdir()
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})

        root = DependencyGraphResolver(make_app_context([resolver])).resolve(str(project_dir))

        assert len(root.sub) == 1

    def test_force_fuzzy_ignores_lock(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        app_context = make_app_context([resolver])
        DependencyGraphResolver(app_context).resolve(str(project_dir))
        _make_lock_newer(project_dir)
        resolver.resolve_calls.clear()

        DependencyGraphResolver(app_context).resolve(str(project_dir), force_fuzzy=True)

        assert len(resolver.resolve_calls) == 1


class TestRecursion:
    """Test sub-dependency handling."""

    def test_cycle_is_detected(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver(
            {TOOL: "1.0.0"},
            {
                TOOL: lock_doc(deps=[("github.com", "acme", "lib", "1.0.0")]),
                LIB: lock_doc(deps=[("github.com", "acme", "tool", "2.0.0")]),
            },
        )
        with pytest.raises(CircularDependencyError) as exc_info:
            DependencyGraphResolver(make_app_context([resolver])).resolve(str(project_dir))
        assert exc_info.value.chain == (TOOL, LIB, TOOL)

    def test_shared_dependency_in_siblings_is_not_a_cycle(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL, "github.com/acme/other"])
        shared = [("github.com", "acme", "lib", "1.0.0")]
        resolver = FakeResolver(
            {TOOL: "1.0.0", "github.com/acme/other": "1.0.0"},
            {TOOL: lock_doc(deps=shared), "github.com/acme/other": lock_doc(deps=shared), LIB: lock_doc()},
        )

        root = DependencyGraphResolver(make_app_context([resolver])).resolve(str(project_dir))

        assert [child.sub[0].coord.repo for child in root.sub] == ["lib", "lib"]
        # Extracted once, reused from the cache the second time
        assert [c.repo for c in resolver.download_calls] == ["tool", "lib", "other"]

    def test_install_trigger_runs_once_after_extraction(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc(triggers={"installScript": "make install"})})
        triggers = FakeTriggerRunner()
        app_context = make_app_context([resolver], trigger_runner=triggers)

        root = DependencyGraphResolver(app_context).resolve(str(project_dir))
        DependencyGraphResolver(app_context).resolve(str(project_dir), force_fuzzy=True)

        assert len(triggers.install_calls) == 1
        script, cwd, env = triggers.install_calls[0]
        assert script == "make install"
        assert cwd == root.sub[0].dir
        assert env == {"DIR": root.sub[0].dir}

    def test_sub_dependency_without_lock_is_fatal(self, project_dir, make_app_context, tmp_path):
        class NoLockExtractor(FakeExtractor):
            def extract(self, file, dest_dir):
                os.makedirs(dest_dir, exist_ok=True)

        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        with pytest.raises(LockFileReadError):
            DependencyGraphResolver(make_app_context([resolver], extractor=NoLockExtractor())).resolve(str(project_dir))

    def test_download_failure(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, packages={})
        with pytest.raises(DownloadError):
            DependencyGraphResolver(make_app_context([resolver])).resolve(str(project_dir))

    def test_extraction_failure_removes_partial_dir(self, project_dir, make_app_context):
        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        app_context = make_app_context([resolver], extractor=FakeExtractor(fail=True))
        graph_resolver = DependencyGraphResolver(app_context)

        with pytest.raises(ExtractionError):
            graph_resolver.resolve(str(project_dir))

        coord = resolver.download_calls[0]
        assert not os.path.exists(os.path.join(graph_resolver.cache_dir_for(coord), "extracted"))

    def test_failed_install_is_retried_on_next_run(self, project_dir, make_app_context):
        class FailingOnce(FakeTriggerRunner):
            def run_install_script(self, script, cwd, env=None):
                super().run_install_script(script, cwd, env)
                if len(self.install_calls) == 1:
                    raise TriggerError("install failed")

        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc(triggers={"installScript": "make install"})})
        triggers = FailingOnce()
        extractor = FakeExtractor()
        app_context = make_app_context([resolver], extractor=extractor, trigger_runner=triggers)

        with pytest.raises(TriggerError):
            DependencyGraphResolver(app_context).resolve(str(project_dir))
        root = DependencyGraphResolver(app_context).resolve(str(project_dir))

        assert len(extractor.calls) == 2
        assert len(triggers.install_calls) == 2
        assert os.path.isdir(root.sub[0].dir)

    def test_missing_lock_in_archive_leaves_no_cache_entry(self, project_dir, make_app_context):
        class NoLockExtractor(FakeExtractor):
            def extract(self, file, dest_dir):
                os.makedirs(dest_dir, exist_ok=True)

        _write_config(project_dir, [TOOL])
        resolver = FakeResolver({TOOL: "1.0.0"}, {TOOL: lock_doc()})
        graph_resolver = DependencyGraphResolver(make_app_context([resolver], extractor=NoLockExtractor()))

        with pytest.raises(LockFileReadError):
            graph_resolver.resolve(str(project_dir))

        coord = resolver.download_calls[0]
        assert not os.path.exists(os.path.join(graph_resolver.cache_dir_for(coord), "extracted"))
