from __future__ import annotations

import pytest

from tests.support.harness import (
    JsRangeError,
    JsTypeError,
    run_runtime_case,
)

EMOJI = chr(0x1F600)

SCENARIOS = [
    pytest.param("1 + 2 * 3", ("number", 7), None, id="precedence"),
    pytest.param("(1 + 2) * 3", ("number", 9), None, id="grouping"),
    pytest.param('"5" + 2', ("string", "52"), None, id="add-string-wins"),
    pytest.param('"5" - 2', ("number", 3), None, id="sub-coerces"),
    pytest.param('"3" * "4"', ("number", 12), None, id="mul-coerces"),
    pytest.param("true + 1", ("number", 2), None, id="bool-to-number"),
    pytest.param("null + 1", ("number", 1), None, id="null-to-zero"),
    pytest.param("undefined + 1", ("number", float("nan")), None, id="undefined-nan"),
    pytest.param("[] + []", ("string", ""), None, id="empty-arrays-concat"),
    pytest.param('[1, 2] + ""', ("string", "1,2"), None, id="array-join"),
    pytest.param('var o = {}; o + ""', ("string", "[object Object]"), None, id="object-tostring"),
    pytest.param('"" + (0.1 + 0.2)', ("string", "0.30000000000000004"), None, id="float-format"),
    pytest.param('"" + 1e21', ("string", "1e+21"), None, id="exponent-format"),
    pytest.param('"" + -0', ("string", "0"), None, id="negative-zero-format"),
    pytest.param("1 / 0", ("number", float("inf")), None, id="div-zero"),
    pytest.param("-1 / 0", ("number", float("-inf")), None, id="div-zero-negative"),
    pytest.param("0 / 0", ("number", float("nan")), None, id="zero-over-zero"),
    pytest.param("-7 % 3", ("number", -1), None, id="remainder-sign"),
    pytest.param("5.5 % 2", ("number", 1.5), None, id="remainder-float"),
    pytest.param("2 ** 10", ("number", 1024), None, id="exponent"),
    pytest.param("5 & 3", ("number", 1), None, id="bit-and"),
    pytest.param("5 | 3", ("number", 7), None, id="bit-or"),
    pytest.param("5 ^ 3", ("number", 6), None, id="bit-xor"),
    pytest.param("~5", ("number", -6), None, id="bit-not"),
    pytest.param("1 << 31", ("number", -2147483648), None, id="shl-wraps"),
    pytest.param("-16 >> 2", ("number", -4), None, id="sar"),
    pytest.param("-1 >>> 0", ("number", 4294967295), None, id="shr-unsigned"),
    pytest.param("1 << 33", ("number", 2), None, id="shift-count-masked"),
    pytest.param("null == undefined", ("bool", True), None, id="null-loose-undefined"),
    pytest.param("null == 0", ("bool", False), None, id="null-not-zero"),
    pytest.param('"1" == 1', ("bool", True), None, id="loose-string-number"),
    pytest.param('0 == ""', ("bool", True), None, id="loose-zero-empty"),
    pytest.param('"0" == false', ("bool", True), None, id="loose-bool"),
    pytest.param('[1] == "1"', ("bool", True), None, id="loose-array-primitive"),
    pytest.param('"1" === 1', ("bool", False), None, id="strict-types-differ"),
    pytest.param("NaN === NaN", ("bool", False), None, id="nan-not-equal"),
    pytest.param("NaN != NaN", ("bool", True), None, id="nan-loose-unequal"),
    pytest.param("0 === -0", ("bool", True), None, id="signed-zero-equal"),
    pytest.param("var a = {}; var b = a; a === b", ("bool", True), None, id="identity-equal"),
    pytest.param("({}) === ({})", ("bool", False), None, id="distinct-objects"),
    pytest.param('"b" > "a"', ("bool", True), None, id="string-compare"),
    pytest.param('"10" < "9"', ("bool", True), None, id="string-compare-lexical"),
    pytest.param('"10" < 9', ("bool", False), None, id="mixed-compare-numeric"),
    pytest.param("NaN < 1", ("bool", False), None, id="nan-compare"),
    pytest.param("NaN >= 1", ("bool", False), None, id="nan-compare-ge"),
    pytest.param("typeof null", ("string", "object"), None, id="typeof-null"),
    pytest.param("typeof function () {}", ("string", "function"), None, id="typeof-function"),
    pytest.param("typeof []", ("string", "object"), None, id="typeof-array"),
    pytest.param("typeof 1", ("string", "number"), None, id="typeof-number"),
    pytest.param("typeof nowhere", ("string", "undefined"), None, id="typeof-undeclared"),
    pytest.param("void 0", ("undefined", None), None, id="void"),
    pytest.param('!""', ("bool", True), None, id="not-empty-string"),
    pytest.param("!!NaN", ("bool", False), None, id="nan-falsy"),
    pytest.param("!![]", ("bool", True), None, id="array-truthy"),
    pytest.param('+"  42  "', ("number", 42), None, id="unary-plus"),
    pytest.param('+"0x1F"', ("number", 31), None, id="unary-plus-hex"),
    pytest.param('-"abc"', ("number", float("nan")), None, id="unary-minus-nan"),
    pytest.param('"a" in {a: 1}', ("bool", True), None, id="in-object"),
    pytest.param("1 in [5, 6]", ("bool", True), None, id="in-array-index"),
    pytest.param('"length" in [5, 6]', ("bool", True), None, id="in-array-length"),
    pytest.param('"a" in "abc"', None, JsTypeError, id="in-primitive"),
    pytest.param("var o = {a: 1}; delete o.a; o.a", ("undefined", None), None, id="delete-prop"),
    pytest.param("var o = {a: 1}; delete o.a", ("bool", True), None, id="delete-result"),
    pytest.param("var a = [1, 2]; delete a.length", ("bool", False), None, id="delete-length"),
    pytest.param("0 || \"x\"", ("string", "x"), None, id="or-returns-operand"),
    pytest.param("1 && 2", ("number", 2), None, id="and-returns-operand"),
    pytest.param(
        "var hit = false; function f() { hit = true; return 1 } false && f(); hit",
        ("bool", False),
        None,
        id="and-short-circuit",
    ),
    pytest.param("1 ? \"y\" : \"n\"", ("string", "y"), None, id="conditional"),
    pytest.param("1, 2, 3", ("number", 3), None, id="sequence"),
    pytest.param("`a${1 + 1}b${\"c\"}`", ("string", "a2bc"), None, id="template"),
    pytest.param('"abc".length', ("number", 3), None, id="string-length"),
    pytest.param('"abc"[1]', ("string", "b"), None, id="string-index"),
    pytest.param("var x = 5; x -= 2; x *= 3; x", ("number", 9), None, id="compound-assign"),
    pytest.param("var s = \"a\"; s += 1; s", ("string", "a1"), None, id="compound-concat"),
    pytest.param("var x = 1; x <<= 3; x |= 1; x", ("number", 9), None, id="compound-bitwise"),
    pytest.param("var i = 1; [i++, i, ++i, i--, --i]", ("array", [1, 2, 3, 3, 1]), None, id="update-ops"),
    pytest.param('var s = "5"; s++; s', ("number", 6), None, id="update-coerces"),
    pytest.param("var r = /ab+c/gi; r.source + r.flags", ("string", "ab+cgi"), None, id="regex-literal"),
    pytest.param("var a = []; a[9] = 1; a.length", ("number", 10), None, id="index-write-grows"),
    pytest.param("var a = []; a[4294967294] = 1", None, JsRangeError, id="huge-index-write-refused"),
    pytest.param("var a = []; a.length = 100000000", None, JsRangeError, id="huge-length-refused"),
    pytest.param(
        'var r; try { var a = [1]; a[4294967294] = 1 } catch (e) { r = e.name + ":" + a.length } r',
        ("string", "RangeError:1"),
        None,
        id="huge-index-write-catchable",
    ),
    pytest.param(f'"{EMOJI}".length', ("number", 2), None, id="astral-length-utf16"),
    pytest.param(f'"a{EMOJI}b"[3]', ("string", "b"), None, id="astral-index-utf16"),
    pytest.param(f'"{EMOJI}"[0] === "\\ud83d"', ("bool", True), None, id="astral-index-high-surrogate"),
    pytest.param(f'"{EMOJI}" === "\\ud83d\\ude00"', ("bool", True), None, id="astral-escape-equal"),
    pytest.param('"\\ud83d\\ude00".length', ("number", 2), None, id="escaped-pair-length"),
    pytest.param(f'"\\ud83d" + "\\ude00" === "{EMOJI}"', ("bool", True), None, id="concat-joins-pair"),
    pytest.param(f'var n = 0; for (var k in "a{EMOJI}") n++; n', ("number", 3), None, id="astral-for-in-units"),
    pytest.param(f'var n = 0; for (var c of "a{EMOJI}") n++; n', ("number", 2), None, id="astral-for-of-code-points"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_operators(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
