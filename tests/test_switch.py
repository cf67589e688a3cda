from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            var out = "";
            switch (2) {
              case 1: out += "a";
              case 2: out += "b";
              case 3: out += "c"; break;
              case 4: out += "d";
            }
            out
        """
        ),
        ("string", "bc"),
        None,
        id="fallthrough",
    ),
    pytest.param(
        dedent(
            """\
            var out = "";
            switch (3) {
              default: out += "d";
              case 1: out += "a"; break;
              case 3: out += "c";
            }
            out
        """
        ),
        ("string", "c"),
        None,
        id="default-first-skipped-on-match",
    ),
    pytest.param(
        dedent(
            """\
            var out = "";
            switch (9) {
              default: out += "d";
              case 1: out += "a"; break;
              case 3: out += "c";
            }
            out
        """
        ),
        ("string", "da"),
        None,
        id="default-falls-through",
    ),
    pytest.param(
        dedent(
            """\
            var out = "none";
            switch ("1") {
              case 1: out = "number";
            }
            out
        """
        ),
        ("string", "none"),
        None,
        id="strict-case-match",
    ),
    pytest.param(
        dedent(
            """\
            var calls = 0;
            function d() { calls++; return 2; }
            switch (d()) {
              case 1: break;
              case 2: break;
            }
            calls
        """
        ),
        ("number", 1),
        None,
        id="discriminant-once",
    ),
    pytest.param(
        dedent(
            """\
            var tested = "";
            function t(v) { tested += v; return v; }
            switch (2) {
              case t(1): break;
              case t(2): break;
              case t(3): break;
            }
            tested
        """
        ),
        ("string", "12"),
        None,
        id="case-tests-lazy",
    ),
    pytest.param(
        dedent(
            """\
            var s = 0;
            for (var i = 0; i < 4; i++) {
              switch (i) {
                case 1: continue;
                default: s += i;
              }
            }
            s
        """
        ),
        ("number", 5),
        None,
        id="continue-passes-through",
    ),
    pytest.param(
        dedent(
            """\
            var n = 0;
            loop: while (true) {
              switch (n) {
                case 3: break loop;
                default: n++;
              }
            }
            n
        """
        ),
        ("number", 3),
        None,
        id="labeled-break-escapes-switch",
    ),
    pytest.param(
        dedent(
            """\
            function pick(x) {
              switch (x) {
                case "a": return 1;
                case "b": return 2;
              }
              return 0;
            }
            [pick("a"), pick("b"), pick("z")]
        """
        ),
        ("array", [1, 2, 0]),
        None,
        id="return-from-case",
    ),
    pytest.param(
        dedent(
            """\
            switch (1) {
              case 1: "one";
            }
        """
        ),
        ("string", "one"),
        None,
        id="completion-value",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_switch(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
