#!/usr/bin/env python
"""Write the token stream of one C++ or CMake file, one token per line."""

from __future__ import annotations

import argparse
from pathlib import Path

from stylecheck.config import RuleOptions
from stylecheck.lexer import Token, tokenize
from stylecheck.source import Language, classify_path


def format_token(idx: int, token: Token) -> str:
    return (
        f"[{idx}] kind={token.kind.name} "
        f"text={token.text!r} "
        f"span=({token.range.start},{token.range.end}) "
        f"at={token.start} depth={token.depth} "
        f"flags={token.flags!r}"
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump stylecheck tokens for one file")
    parser.add_argument("input", type=Path, help="Source file to tokenize")
    parser.add_argument("--output", type=Path, default=None, help="Write here instead of stdout")
    parser.add_argument("--trivia", action="store_true", help="Include whitespace and newline tokens")
    args = parser.parse_args()

    text = args.input.read_text(encoding="utf-8")
    classified = classify_path(args.input, RuleOptions())
    language = classified[0] if classified is not None else Language.CPP
    lexed = tokenize(text, language)
    tokens = [token for token in lexed.tokens if args.trivia or not token.kind.is_trivia]

    lines = [format_token(idx, token) for idx, token in enumerate(tokens)]
    lines.extend(f"! {d.rule_id} at={d.position} {d.message}" for d in lexed.diagnostics)
    if args.output is None:
        print("\n".join(lines))
        return 0

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    print(f"Wrote {len(tokens)} tokens to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
