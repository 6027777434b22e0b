"""pagesmith のコマンドラインインターフェース。"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable

from .builder import build_site
from .config import (
    DEFAULT_BUILD_DIR,
    DEFAULT_PAGES_DIR,
    DEFAULT_SITE_CONFIG,
    DEFAULT_STATIC_DIR,
    BuildConfig,
)
from .errors import BuildError


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Markdown のページ群から静的サイトを生成します")
    parser.add_argument("--pages", dest="pages_dir", type=Path, default=DEFAULT_PAGES_DIR, help="Markdown ファイルを含むディレクトリ")
    parser.add_argument("--out", dest="build_dir", type=Path, default=DEFAULT_BUILD_DIR, help="生成物を書き出すディレクトリ (毎回削除して作り直します)")
    parser.add_argument("--static", dest="static_dir", type=Path, default=DEFAULT_STATIC_DIR, help="そのままコピーする静的ファイルのディレクトリ")
    parser.add_argument("--no-static", dest="no_static", action="store_true", help="静的ファイルのコピーを行わない")
    parser.add_argument("--style", dest="stylesheet", type=Path, default=None, help="style.css として出力するスタイルシート (省略時は組み込みのもの)")
    parser.add_argument("--config", dest="site_config", type=Path, default=None, help=f"サイト設定へのパス (省略時は {DEFAULT_SITE_CONFIG} があれば使用)")
    parser.add_argument(
        "--max-workers",
        dest="max_workers",
        type=int,
        default=None,
        help="ファイル入出力の同時実行数 (省略時は CPU 数から自動推定)",
    )
    parser.add_argument("--verbose", dest="verbose", action="store_true", help="進捗ログを表示")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    _validate_args(args)
    _configure_logging(args.verbose)
    config = BuildConfig.from_args(
        pages_dir=args.pages_dir,
        build_dir=args.build_dir,
        static_dir=None if args.no_static else args.static_dir,
        stylesheet=args.stylesheet,
        site_config=args.site_config,
        max_workers=args.max_workers,
    )
    try:
        result = build_site(config)
    except BuildError as exc:
        print(f"[エラー] {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    summary = {
        "pages": len(result.documents),
        "static_files": len(result.static_files),
        "output": str(result.build_dir),
    }
    print(json.dumps(summary, ensure_ascii=False))


def _validate_args(args: argparse.Namespace) -> None:
    errors: list[str] = []
    if not args.pages_dir.exists():
        errors.append(f"[エラー] ページディレクトリが見つかりません: {args.pages_dir}")
    elif not args.pages_dir.is_dir():
        errors.append(f"[エラー] ページのパスはディレクトリではありません: {args.pages_dir}")

    if not args.no_static and not args.static_dir.is_dir():
        errors.append(
            f"[エラー] 静的ファイルのディレクトリが見つかりません: {args.static_dir} (不要なら --no-static を指定)"
        )

    if args.build_dir.exists() and not args.build_dir.is_dir():
        errors.append(f"[エラー] 出力パスがディレクトリではありません: {args.build_dir}")

    if args.stylesheet is not None and not args.stylesheet.is_file():
        errors.append(f"[エラー] スタイルシートが見つかりません: {args.stylesheet}")

    if args.site_config is not None and not args.site_config.is_file():
        errors.append(f"[エラー] サイト設定ファイルが見つかりません: {args.site_config}")

    if args.max_workers is not None and args.max_workers < 1:
        errors.append("[エラー] --max-workers には 1 以上の整数を指定してください。")

    if errors:
        for message in errors:
            print(message, file=sys.stderr)
        raise SystemExit(2)

    args.pages_dir = args.pages_dir.resolve()
    args.build_dir = args.build_dir.resolve()


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


if __name__ == "__main__":
    main()
