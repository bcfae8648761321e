"""Tests for the concurrent materializer."""

from pathlib import Path
import threading
import time

import pytest

from asyncapi_polyglot.errors import MaterializationError
from asyncapi_polyglot.materializer import (
    Artifact,
    Materializer,
    WriteStatus,
    materialize,
)


def tree(base: Path) -> dict[str, str]:
    """Every file under ``base`` as relative path -> text."""
    return {
        path.relative_to(base).as_posix(): path.read_text()
        for path in sorted(base.rglob("*"))
        if path.is_file()
    }


def boom() -> str:
    msg = "template exploded"
    raise RuntimeError(msg)


ARTIFACTS = [
    Artifact("schema/types.capnp", "struct A {}\n"),
    Artifact("python/orders/event_bus.py", "x = 1\n"),
    Artifact("README.md", lambda: "# Orders\n"),
]


class TestArtifact:
    """Tests for Artifact."""

    def test_render_text_and_thunk(self) -> None:
        assert Artifact("a", "text").render() == "text"
        assert Artifact("a", lambda: "lazy").render() == "lazy"

    def test_under(self) -> None:
        artifact = Artifact("src/lib.rs", "x").under("rust")
        assert artifact.path == "rust/src/lib.rs"
        assert artifact.content == "x"

    def test_resolved(self) -> None:
        text = Artifact("a", "text")
        assert text.resolved() is text
        assert Artifact("a", lambda: "lazy").resolved() == Artifact("a", "lazy")

    def test_resolved_raises_render_errors(self) -> None:
        with pytest.raises(RuntimeError, match="template exploded"):
            Artifact("a", boom).resolved()


class TestMaterializer:
    """Tests for Materializer.run."""

    @pytest.mark.asyncio
    async def test_writes_every_artifact(self, tmp_path: Path) -> None:
        result = await Materializer(tmp_path, max_workers=2).run(ARTIFACTS)

        assert result.ok
        assert result.count == 3
        assert result.written == [tmp_path / a.path for a in ARTIFACTS]
        assert tree(tmp_path) == {
            "schema/types.capnp": "struct A {}\n",
            "python/orders/event_bus.py": "x = 1\n",
            "README.md": "# Orders\n",
        }

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, tmp_path: Path) -> None:
        materializer = Materializer(tmp_path)
        await materializer.run(ARTIFACTS)
        first = tree(tmp_path)

        await materializer.run(ARTIFACTS)
        assert tree(tmp_path) == first

    @pytest.mark.asyncio
    async def test_line_endings_are_kept(self, tmp_path: Path) -> None:
        await Materializer(tmp_path).run([Artifact("Makefile", "all:\n\techo hi\n")])
        assert (tmp_path / "Makefile").read_bytes() == b"all:\n\techo hi\n"

    @pytest.mark.asyncio
    async def test_failures_are_aggregated(self, tmp_path: Path) -> None:
        """A failing thunk fails its own path only; siblings are still written."""
        (tmp_path / "occupied").mkdir()
        artifacts = [
            Artifact("ok.txt", "fine"),
            Artifact("broken.txt", boom),
            Artifact("occupied", "a directory is in the way"),
        ]

        with pytest.raises(MaterializationError) as exc_info:
            await Materializer(tmp_path).run(artifacts)

        failures = dict(exc_info.value.failures)
        assert set(failures) == {tmp_path / "broken.txt", tmp_path / "occupied"}
        assert isinstance(failures[tmp_path / "broken.txt"], RuntimeError)
        assert "2 artifact(s) failed to write" in str(exc_info.value)
        assert (tmp_path / "ok.txt").read_text() == "fine"
        assert not (tmp_path / "broken.txt").exists()

    @pytest.mark.asyncio
    async def test_directory_creation_failure(self, tmp_path: Path) -> None:
        (tmp_path / "python").write_text("not a directory")
        artifacts = [Artifact("python/client.py", "x"), Artifact("rust/lib.rs", "y")]

        with pytest.raises(MaterializationError) as exc_info:
            await Materializer(tmp_path).run(artifacts)

        assert [path for path, _ in exc_info.value.failures] == [tmp_path / "python/client.py"]
        assert (tmp_path / "rust/lib.rs").read_text() == "y"

    @pytest.mark.asyncio
    async def test_slow_write_times_out(self, tmp_path: Path) -> None:
        def slow() -> str:
            time.sleep(0.5)
            return "late"

        artifacts = [Artifact("slow.txt", slow), Artifact("fast.txt", "quick")]
        with pytest.raises(MaterializationError) as exc_info:
            await Materializer(tmp_path, task_timeout=0.05).run(artifacts)

        ((path, error),) = exc_info.value.failures
        assert path == tmp_path / "slow.txt"
        assert isinstance(error, TimeoutError)
        assert (tmp_path / "fast.txt").read_text() == "quick"

    @pytest.mark.asyncio
    async def test_cancellation_skips_pending_writes(self, tmp_path: Path) -> None:
        cancel = threading.Event()

        def first() -> str:
            cancel.set()
            return "first"

        artifacts = [Artifact("a.txt", first), Artifact("b.txt", "b"), Artifact("c.txt", "c")]
        with pytest.raises(MaterializationError) as exc_info:
            await Materializer(tmp_path, max_workers=1).run(artifacts, cancel)

        assert exc_info.value.failures == []
        assert exc_info.value.skipped == [tmp_path / "b.txt", tmp_path / "c.txt"]
        assert tree(tmp_path) == {"a.txt": "first"}

    @pytest.mark.asyncio
    async def test_cancel_before_start_writes_nothing(self, tmp_path: Path) -> None:
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(MaterializationError):
            await Materializer(tmp_path).run(ARTIFACTS, cancel)
        assert tree(tmp_path) == {}

    @pytest.mark.parametrize(
        "paths",
        [
            ["/etc/passwd"],
            ["../outside.txt"],
            ["a/../../b.txt"],
            [""],
            ["same.txt", "same.txt"],
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_paths_rejected_before_io(
        self, tmp_path: Path, paths: list[str]
    ) -> None:
        artifacts = [Artifact("first.txt", "x"), *(Artifact(p, "x") for p in paths)]
        with pytest.raises(ValueError, match="path"):
            await Materializer(tmp_path).run(artifacts)
        assert tree(tmp_path) == {}

    def test_max_workers_must_be_positive(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            Materializer(tmp_path, max_workers=0)


class TestMaterialize:
    """Tests for the synchronous wrapper."""

    def test_returns_outcomes_in_input_order(self, tmp_path: Path) -> None:
        result = materialize(ARTIFACTS, tmp_path, max_workers=1)
        assert [o.status for o in result.outcomes] == [WriteStatus.WRITTEN] * 3
        assert result.failures == []
        assert result.skipped == []
