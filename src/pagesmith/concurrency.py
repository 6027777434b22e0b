"""ファイル単位の処理を並列実行し、最初の失敗で打ち切るためのヘルパー。"""

from __future__ import annotations

import asyncio
import os
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


def resolve_worker_count(total: int, requested: int | None = None) -> int:
    """同時実行数の上限を決定します。

    明示的な指定があればそれを優先し、なければ I/O 待ちが中心の処理として
    CPU 数から上限を推定します。
    """

    if total <= 0:
        return 1
    if requested is not None and requested > 0:
        return max(1, min(total, requested))
    cpu_total = os.cpu_count() or 2
    baseline = min(32, cpu_total * 4)
    return max(1, min(total, baseline))


async def gather_fail_fast(
    factories: Sequence[TaskFactory[T]], limit: int | None = None
) -> list[T]:
    """各ファクトリのコルーチンを並列実行し、入力順に結果を返します。

    いずれかが失敗した時点で残りのタスクをキャンセルして待ち合わせ、
    失敗したタスクの例外をそのまま送出します。同じタイミングで複数が
    失敗していた場合は入力順で先頭のものを採用します。
    """

    if not factories:
        return []
    semaphore = asyncio.Semaphore(limit) if limit is not None and limit > 0 else None

    async def run(factory: TaskFactory[T]) -> T:
        if semaphore is None:
            return await factory()
        async with semaphore:
            return await factory()

    tasks = [asyncio.create_task(run(factory)) for factory in factories]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    error = _first_error(tasks)
    if error is not None:
        await _cancel_all(tasks)
        raise error
    return [task.result() for task in tasks]


async def _cancel_all(tasks: Sequence[asyncio.Task[T]]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


def _first_error(tasks: Sequence[asyncio.Task[T]]) -> BaseException | None:
    # 失敗したタスクの例外はすべて取り出し、未回収の警告を出さないようにする
    errors = [
        task.exception() for task in tasks if task.done() and not task.cancelled()
    ]
    return next((error for error in errors if error is not None), None)
