import textwrap

from stylecheck.lexer import LexResult, Token, TokenFlags, TokenKind, tokenize
from stylecheck.source import Language
from tests._debug import debug_dump_tokens
from tests._shared_cases import CLEAN_CASES


def lex(text: str, language: Language = Language.CPP) -> LexResult:
    result = tokenize(text, language)
    debug_dump_tokens("lex", text, result.tokens)
    return result


def significant(text: str, language: Language = Language.CPP) -> list[Token]:
    return list(lex(text, language).significant)


def texts(tokens: list[Token]) -> list[str]:
    return [token.text for token in tokens]


def test_every_character_lands_in_exactly_one_token() -> None:
    for case in CLEAN_CASES:
        language = Language.CMAKE if case.path.endswith("CMakeLists.txt") else Language.CPP
        result = lex(case.source, language)
        assert "".join(token.text for token in result.tokens) == case.source, case.name
        assert result.tokens[-1].kind == TokenKind.EOF


def test_malformed_input_is_still_lossless() -> None:
    src = 'int x = "abc;\n/* never closed\n'

    result = lex(src)

    assert "".join(token.text for token in result.tokens) == src
    assert [d.rule_id for d in result.diagnostics] == ["malformed-literal", "malformed-comment"]


def test_declaration_token_kinds() -> None:
    tokens = significant("int count = 42;\n")

    assert [token.kind for token in tokens] == [
        TokenKind.IDENTIFIER,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCT,
        TokenKind.NUMBER,
        TokenKind.PUNCT,
    ]
    assert tokens[0].is_keyword
    assert tokens[1].is_word
    assert not tokens[1].is_keyword


def test_positions_are_one_based() -> None:
    tokens = significant("int a;\n  b = 1;\n")

    assert str(tokens[0].start) == "1:1"
    assert str(tokens[1].start) == "1:5"
    assert str(tokens[3].start) == "2:3"
    assert str(tokens[3].end) == "2:4"


def test_first_token_on_each_line_is_flagged() -> None:
    tokens = significant("a = 1;\nb = 2;\n")

    flagged = [token.text for token in tokens if token.has_preceding_line_break()]

    assert flagged == ["a", "b"]


def test_multi_character_operators_take_the_longest_match() -> None:
    tokens = significant("a <<= b->c::d != e;\n")

    assert texts(tokens) == ["a", "<<=", "b", "->", "c", "::", "d", "!=", "e", ";"]


def test_template_angles_are_flagged() -> None:
    tokens = significant("std::vector<int> values;\n")

    opener = tokens[3]
    closer = tokens[5]
    assert opener.text == "<" and opener.is_template_open
    assert closer.text == ">" and closer.is_template_close
    assert opener.depth == closer.depth


def test_spaced_less_than_is_a_comparison() -> None:
    tokens = significant("bool b = a < c;\n")

    less = tokens[4]
    assert less.text == "<"
    assert not less.is_template_open


def test_template_keyword_opens_angle_even_after_a_space() -> None:
    tokens = significant("template <typename Value>\nstruct box;\n")

    assert tokens[1].is_template_open
    assert tokens[4].is_template_close


def test_nested_template_closers_are_split() -> None:
    tokens = significant("std::map<int, std::vector<int>> table;\n")

    closers = [token for token in tokens if token.is_template_close]
    assert len(closers) == 2
    assert all(token.text == ">" for token in closers)


def test_unclosed_template_angle_is_dropped_at_semicolon() -> None:
    result = lex("x = a<b;\ny = 1;\n")

    assert result.diagnostics == ()


def test_unary_minus_is_flagged_after_operator() -> None:
    tokens = significant("x = -1 - y;\n")

    minus_signs = [token for token in tokens if token.text == "-"]
    assert minus_signs[0].has_flag(TokenFlags.UNARY)
    assert not minus_signs[1].has_flag(TokenFlags.UNARY)


def test_unary_plus_after_return_keyword() -> None:
    tokens = significant("return +x;\n")

    assert tokens[1].has_flag(TokenFlags.UNARY)


def test_number_forms() -> None:
    tokens = significant("a = 1'000'000 + 1.5e-3f + 0x1F + .5;\n")

    numbers = [token.text for token in tokens if token.kind == TokenKind.NUMBER]
    assert numbers == ["1'000'000", "1.5e-3f", "0x1F", ".5"]


def test_string_and_character_literals() -> None:
    src = textwrap.dedent(
        r"""
        auto a = "say \"hi\"";
        auto b = 'x';
        auto c = u8"bytes";
        auto d = "suffix"s;
        """
    ).lstrip()

    strings = [token for token in significant(src) if token.kind == TokenKind.STRING]

    assert texts(strings) == ['"say \\"hi\\""', "'x'", 'u8"bytes"', '"suffix"s']
    assert strings[0].has_flag(TokenFlags.HAS_ESCAPE)


def test_raw_string_keeps_quotes_and_newlines() -> None:
    src = 'auto s = R"json({ "a": 1 }\n)json";\n'

    tokens = significant(src)

    raw = tokens[3]
    assert raw.kind == TokenKind.STRING
    assert raw.text == 'R"json({ "a": 1 }\n)json"'
    assert raw.end.line == 2


def test_invalid_raw_string_delimiter_is_malformed() -> None:
    result = lex('auto s = R"a b(x)a b";\n')

    assert [d.message for d in result.diagnostics] == ["Invalid raw string delimiter"]


def test_unterminated_character_literal() -> None:
    result = lex("char c = 'x;\n")

    assert [(d.rule_id, d.message) for d in result.diagnostics] == [
        ("malformed-literal", "Unterminated character literal")
    ]


def test_directive_covers_whole_line_with_continuations() -> None:
    src = "#define TWICE( x ) \\\n    ( ( x ) * 2 )\nint y;\n"

    tokens = significant(src)

    assert tokens[0].kind == TokenKind.DIRECTIVE
    assert tokens[0].text == "#define TWICE( x ) \\\n    ( ( x ) * 2 )"
    assert texts(tokens[1:]) == ["int", "y", ";"]


def test_hash_inside_a_line_is_not_a_directive() -> None:
    tokens = significant("a # b\n")

    assert [token.kind for token in tokens] == [TokenKind.IDENTIFIER, TokenKind.PUNCT, TokenKind.IDENTIFIER]


def test_comments_are_trivia() -> None:
    result = lex("int a; // trailing\n/* block */ int b;\n")

    comments = [token for token in result.tokens if token.kind == TokenKind.COMMENT]
    assert texts(comments) == ["// trailing", "/* block */"]
    assert all(token.kind.is_trivia for token in comments)
    assert "// trailing" not in texts(list(result.significant))


def test_crlf_newlines() -> None:
    result = lex("int a;\r\nint b;\r\n")

    newlines = [token for token in result.tokens if token.kind == TokenKind.NEWLINE]
    assert texts(newlines) == ["\r\n", "\r\n"]
    assert str(result.significant[3].start) == "2:1"


def test_brackets_are_paired_and_share_depth() -> None:
    result = lex("foo( bar[ 1 ], { 2 } );\n")
    tokens = list(result.significant)

    for opener_text, closer_text in (("(", ")"), ("[", "]"), ("{", "}")):
        opener = next(token for token in tokens if token.text == opener_text)
        closer = next(token for token in tokens if token.text == closer_text)
        assert result.partner(opener) == closer.range.start
        assert result.partner(closer) == opener.range.start
        assert opener.depth == closer.depth


def test_line_frames_record_open_scopes() -> None:
    result = lex("void run() {\n    call(\n        1 );\n}\n")

    assert result.line_frames[1] == ()
    assert [frame.opener for frame in result.line_frames[2]] == ["{"]
    assert [frame.opener for frame in result.line_frames[3]] == ["{", "("]
    assert [frame.opener for frame in result.line_frames[4]] == ["{"]


def test_unmatched_closer_marks_region_until_next_statement() -> None:
    result = lex("int a;\n)\nint b;\nint c;\n")

    assert [(d.rule_id, d.line) for d in result.diagnostics] == [("unparseable-region", 2)]
    assert result.unparseable_lines == frozenset({2, 3})


def test_unclosed_scopes_are_reported_at_their_openers() -> None:
    result = lex("void run() {\n    call( 1,\n")

    assert [(d.rule_id, d.message, d.line) for d in result.diagnostics] == [
        ("unclosed-scope", "`{` is never closed", 1),
        ("unclosed-scope", "`(` is never closed", 2),
    ]


def test_empty_input() -> None:
    result = lex("")

    assert [token.kind for token in result.tokens] == [TokenKind.EOF]
    assert result.diagnostics == ()


# -------------------------
# CMake
# -------------------------


def test_cmake_command_names_are_directives() -> None:
    tokens = significant("set( value ${other} )\n", Language.CMAKE)

    assert [token.kind for token in tokens] == [
        TokenKind.DIRECTIVE,
        TokenKind.PUNCT,
        TokenKind.IDENTIFIER,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCT,
    ]
    assert texts(tokens) == ["set", "(", "value", "${other}", ")"]


def test_cmake_word_before_nested_paren_is_not_a_command() -> None:
    tokens = significant("if( NOT ( a AND b ) )\n", Language.CMAKE)

    assert tokens[0].kind == TokenKind.DIRECTIVE
    assert tokens[2].text == "NOT"
    assert tokens[2].kind == TokenKind.IDENTIFIER


def test_cmake_quoted_and_bracket_arguments() -> None:
    src = 'message( "a ( b" [=[raw ]] text]=] )\n'

    tokens = significant(src, Language.CMAKE)

    assert [token.kind for token in tokens[2:4]] == [TokenKind.STRING, TokenKind.STRING]
    assert texts(tokens[2:4]) == ['"a ( b"', "[=[raw ]] text]=]"]


def test_cmake_comments() -> None:
    src = "# line comment\n#[[ block\ncomment ]]\nset( a 1 )\n"

    result = lex(src, Language.CMAKE)

    comments = [token for token in result.tokens if token.kind == TokenKind.COMMENT]
    assert texts(comments) == ["# line comment", "#[[ block\ncomment ]]"]
    assert result.significant[0].text == "set"


def test_cmake_unterminated_quoted_argument() -> None:
    result = lex('message( "oops )\n', Language.CMAKE)

    assert [(d.rule_id, d.message) for d in result.diagnostics] == [
        ("malformed-literal", "Unterminated quoted argument"),
        ("unclosed-scope", "`(` is never closed"),
    ]
