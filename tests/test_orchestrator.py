"""Tests for xcross.build.orchestrator (multi-target runs)."""

import threading

import pytest

from xcross.build import BuildOptions, BuildSummary, build_all, run_build_all
from xcross.build.options import BuildDecision, Strategy
from xcross.errors import BuildError, ToolchainError
from xcross.target import Target


class FakeBuilder:
    """Builder stand-in: fails for targets in `failing`, records the options it saw."""

    def __init__(self, failing: set[str], seen: list[BuildOptions], barrier: threading.Barrier | None = None):
        self.failing = failing
        self.seen = seen
        self.barrier = barrier

    def build(self, options: BuildOptions) -> BuildDecision:
        self.seen.append(options)
        if self.barrier is not None:
            self.barrier.wait()
        if options.target in self.failing:
            msg = f"Building failed for target {options.target}"
            raise BuildError(msg, target=options.target, exit_code_value=101)
        return BuildDecision(Target.from_triple(options.target), Strategy.NATIVE)


A = "x86_64-unknown-linux-gnu"
B = "aarch64-unknown-linux-gnu"
C = "x86_64-pc-windows-gnu"


class TestBuildAll:
    def test_parallel_aggregates_successes_and_failures(self) -> None:
        seen: list[BuildOptions] = []
        summary = build_all(
            [A, B, C],
            BuildOptions(release=True),
            lambda: FakeBuilder({B}, seen),
            parallel=True,
            jobs=3,
        )
        assert set(summary.successes) == {A, C}
        assert summary.failures == [B]
        assert not summary.ok
        assert isinstance(summary.errors[B], BuildError)

    def test_sequential_preserves_order(self) -> None:
        seen: list[BuildOptions] = []
        summary = build_all([A, B, C], BuildOptions(), lambda: FakeBuilder({B}, seen))
        assert summary.successes == [A, C]
        assert summary.failures == [B]
        assert [o.target for o in seen] == [A, B, C]

    def test_all_succeed(self) -> None:
        summary = build_all([A, C], BuildOptions(), lambda: FakeBuilder(set(), []), parallel=True)
        assert summary.ok
        assert summary.failures == []

    def test_each_target_gets_fresh_builder_and_options(self) -> None:
        seen: list[BuildOptions] = []
        created: list[FakeBuilder] = []
        options = BuildOptions(cargo_args=["--locked"])

        def factory() -> FakeBuilder:
            b = FakeBuilder(set(), seen)
            created.append(b)
            return b

        build_all([A, B], options, factory)
        assert len(created) == 2
        assert options.target is None
        assert [o.target for o in seen] == [A, B]
        assert seen[0].cargo_args == ["--locked"]
        assert seen[0].cargo_args is not options.cargo_args

    def test_parallel_runs_concurrently(self) -> None:
        barrier = threading.Barrier(3, timeout=10)
        summary = build_all(
            [A, B, C],
            BuildOptions(),
            lambda: FakeBuilder(set(), [], barrier),
            parallel=True,
            jobs=3,
        )
        assert summary.ok
        assert len(summary.successes) == 3

    def test_strategy_errors_recorded_not_raised(self) -> None:
        class Failing:
            def build(self, options: BuildOptions) -> BuildDecision:
                raise ToolchainError("Zig not found")

        summary = build_all([A, B], BuildOptions(), Failing)
        assert summary.failures == [A, B]

    def test_oserror_recorded(self) -> None:
        class Broken:
            def build(self, options: BuildOptions) -> BuildDecision:
                raise PermissionError("denied")

        summary = build_all([A], BuildOptions(), Broken, parallel=True)
        assert summary.failures == [A]

    @pytest.mark.parametrize("parallel", [False, True])
    def test_unexpected_exception_propagates(self, parallel: bool) -> None:
        class Buggy:
            def build(self, options: BuildOptions) -> BuildDecision:
                raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            build_all([A, B], BuildOptions(), Buggy, parallel=parallel)


class TestBuildSummary:
    def test_raise_for_failures(self) -> None:
        summary = BuildSummary()
        summary.record_success(A)
        summary.record_failure(B, BuildError("boom"))
        with pytest.raises(BuildError) as ei:
            summary.raise_for_failures()
        assert ei.value.message == "Some targets failed to build"
        assert B in ei.value.suggestion

    def test_no_raise_when_ok(self) -> None:
        summary = BuildSummary()
        summary.record_success(A)
        summary.raise_for_failures()
        assert summary.ok

    def test_print_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        summary = BuildSummary()
        summary.record_success(A)
        summary.record_failure(B, BuildError("boom"))
        summary.print_summary()
        captured = capsys.readouterr()
        assert "1 target(s) built successfully" in captured.out
        assert "1 target(s) failed" in captured.err
        assert f"  - {B}: boom" in captured.err


class TestRunBuildAll:
    def test_exit_codes(self) -> None:
        assert run_build_all([A, C], BuildOptions(), lambda: FakeBuilder(set(), [])) == 0
        assert run_build_all([A, B], BuildOptions(), lambda: FakeBuilder({B}, [])) == 5
