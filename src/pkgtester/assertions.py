"""Assertions over workflow results for use in test cases.

Every failure message carries the full transcript so a failing test
can be diagnosed without re-running it.
"""

from pkgtester.core.result import Result


def concat_output(text: str) -> str:
    """Join lines with single spaces, dropping carriage returns.

    A trailing newline ends the last line rather than starting an
    empty one, so "a\\nb\\n" becomes "a b".
    """
    lines = text.replace("\r", "").split("\n")
    if lines[-1] == "":
        lines.pop()
    return " ".join(lines)


def _expect_success(verb: str, result: Result) -> None:
    if not result.successful:
        raise AssertionError(
            f"expected: 'setup {verb}' should succeed\n"
            f"  output: {result.output_text}"
        )


def assert_configure_succeeded(result: Result) -> None:
    _expect_success("configure", result)


def assert_build_succeeded(result: Result) -> None:
    _expect_success("build", result)


def assert_haddock_succeeded(result: Result) -> None:
    _expect_success("haddock", result)


def assert_install_succeeded(result: Result) -> None:
    _expect_success("install", result)


def assert_test_succeeded(result: Result) -> None:
    _expect_success("test", result)


def assert_bench_succeeded(result: Result) -> None:
    _expect_success("bench", result)


def assert_build_failed(result: Result) -> None:
    """Pass if any step of the chain failed."""
    if result.successful:
        raise AssertionError(
            "expected: 'setup build' should fail\n"
            f"  output: {result.output_text}"
        )


def assert_output_contains(needle: str, result: Result) -> None:
    """Pass if needle occurs in the transcript, line breaks read as spaces."""
    output = result.output_text
    if needle not in concat_output(output):
        raise AssertionError(
            f" expected: {needle}\n"
            f" in output: {output}"
        )


def assert_output_does_not_contain(needle: str, result: Result) -> None:
    output = result.output_text
    if needle in concat_output(output):
        raise AssertionError(
            f"unexpected: {needle} in output: {output}"
        )
