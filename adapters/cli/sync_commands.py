"""
델타 동기화 CLI 명령어

DeltaSyncUseCase를 CLI 명령으로 노출하는 어댑터입니다.
사용자 → 폴더 → 메시지 순서로 각 단계를 따로 또는 한 번에 실행할 수 있습니다.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from core.domain.checkpoint_keys import ScopeFilter
from core.domain.entities import KeyStatus, ScopeType, SyncPassResult
from core.domain.ports import CheckpointStorePort
from adapters.db.database import open_checkpoint_session
from adapters.factory import AdapterFactory, get_adapter_factory

# CLI 앱 생성
app = typer.Typer(name="sync", help="델타 동기화 명령어")
console = Console()


@asynccontextmanager
async def open_checkpoint_store(
    factory: AdapterFactory,
    in_memory: bool = False,
) -> AsyncGenerator[CheckpointStorePort, None]:
    """설정된 데이터베이스 또는 메모리 체크포인트 저장소를 엽니다."""
    if in_memory:
        yield factory.create_memory_checkpoint_store()
        return

    async with open_checkpoint_session(factory.get_config(), create_tables=True) as session:
        yield factory.create_checkpoint_repository(session)


def print_pass_result(result: SyncPassResult) -> None:
    """패스 결과를 표로 출력합니다."""
    table = Table(title=f"동기화 결과: {result.filter_pattern}")
    table.add_column("체크포인트 키", style="cyan")
    table.add_column("상태", style="green")
    table.add_column("아이템", justify="right")
    table.add_column("새 하위 키", justify="right", style="blue")
    table.add_column("변경", style="yellow")
    table.add_column("오류", style="red")

    for outcome in result.outcomes:
        status_style = "green" if outcome.status == KeyStatus.SUCCESS else "red"
        table.add_row(
            outcome.key,
            f"[{status_style}]{outcome.status.value}[/{status_style}]",
            str(outcome.item_count),
            str(len(outcome.seeded_keys)),
            "예" if outcome.drifted else "아니오",
            outcome.error_message or "-",
        )

    console.print(table)
    if result.bootstrapped:
        console.print("[yellow]일치하는 키가 없어 기준 동기화로 시작했습니다.[/yellow]")
    console.print(
        f"성공: {len(result.succeeded)}, 실패: {len(result.failed)}, 아이템: {result.item_count}"
    )


async def _run_pass(scope_type: ScopeType, pattern: Optional[str], in_memory: bool) -> SyncPassResult:
    factory = get_adapter_factory()
    scope_filter = ScopeFilter(scope_type, pattern or factory.get_config().get_filter_regexes()[scope_type])

    async with open_checkpoint_store(factory, in_memory) as store:
        usecase = factory.create_delta_sync_usecase(store)
        return await usecase.run_pass(scope_filter)


async def _run_all(in_memory: bool) -> List[SyncPassResult]:
    factory = get_adapter_factory()

    async with open_checkpoint_store(factory, in_memory) as store:
        usecase = factory.create_delta_sync_usecase(store)
        return await usecase.run_hierarchy(factory.get_config().get_filter_regexes())


def _sync_command(scope_type: ScopeType, pattern: Optional[str], in_memory: bool) -> None:
    try:
        result = asyncio.run(_run_pass(scope_type, pattern, in_memory))
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)

    print_pass_result(result)
    if result.failed:
        raise typer.Exit(2)


@app.command("users")
def sync_users(
    pattern: Optional[str] = typer.Option(None, "--filter", help="체크포인트 키 필터 정규식"),
    in_memory: bool = typer.Option(False, "--in-memory", help="메모리 저장소 사용 (체크포인트 미보존)"),
):
    """전체 사용자 델타 동기화를 실행합니다."""
    _sync_command(ScopeType.ALL_USERS, pattern, in_memory)


@app.command("folders")
def sync_folders(
    pattern: Optional[str] = typer.Option(None, "--filter", help="체크포인트 키 필터 정규식"),
    in_memory: bool = typer.Option(False, "--in-memory", help="메모리 저장소 사용 (체크포인트 미보존)"),
):
    """사용자별 메일 폴더 델타 동기화를 실행합니다."""
    _sync_command(ScopeType.USER_FOLDERS, pattern, in_memory)


@app.command("messages")
def sync_messages(
    pattern: Optional[str] = typer.Option(None, "--filter", help="체크포인트 키 필터 정규식"),
    in_memory: bool = typer.Option(False, "--in-memory", help="메모리 저장소 사용 (체크포인트 미보존)"),
):
    """폴더별 메시지 델타 동기화를 실행합니다."""
    _sync_command(ScopeType.USER_FOLDER_MESSAGES, pattern, in_memory)


@app.command("all")
def sync_all(
    in_memory: bool = typer.Option(False, "--in-memory", help="메모리 저장소 사용 (체크포인트 미보존)"),
):
    """사용자 → 폴더 → 메시지 순서로 모든 단계를 실행합니다."""
    try:
        results = asyncio.run(_run_all(in_memory))
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)

    for result in results:
        print_pass_result(result)
    if any(result.failed for result in results):
        raise typer.Exit(2)


@app.command("watch")
def watch(
    interval: Optional[int] = typer.Option(None, "--interval", help="동기화 간격(분), 기본값은 설정 값"),
    iterations: int = typer.Option(0, "--iterations", help="실행 횟수 (0이면 중단할 때까지)"),
):
    """설정된 간격마다 전체 동기화를 반복합니다."""
    factory = get_adapter_factory()
    minutes = interval or factory.get_config().get_sync_interval_minutes()

    async def _watch():
        count = 0
        while True:
            count += 1
            console.print(f"[blue]동기화 {count}회차 시작[/blue]")
            for result in await _run_all(in_memory=False):
                print_pass_result(result)

            if iterations and count >= iterations:
                return
            console.print(f"[dim]{minutes}분 후 다음 동기화를 실행합니다.[/dim]")
            await asyncio.sleep(minutes * 60)

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("[yellow]동기화 반복을 중단했습니다.[/yellow]")
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)
