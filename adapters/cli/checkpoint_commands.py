"""
체크포인트 관리 CLI 명령어

데이터베이스 체크포인트 저장소를 조회하고 관리합니다.
동기화 엔진은 키를 삭제하지 않으므로, 더 이상 필요 없는 키의 정리는
purge 명령으로 운영자가 수행합니다.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from core.domain.checkpoint_keys import parse_checkpoint_key
from core.domain.exceptions import MalformedCheckpointKeyError
from adapters.db.checkpoint_repository import CheckpointRepositoryAdapter
from adapters.db.database import open_checkpoint_session
from config.adapters import get_config

# CLI 앱 생성
app = typer.Typer(name="checkpoint", help="체크포인트 관리 명령어")
console = Console()


def _shorten(value: str, width: int = 80) -> str:
    if not value:
        return "(기준 동기화 대기)"
    return value if len(value) <= width else value[:width] + "..."


@app.command("list")
def list_checkpoints(
    prefix: Optional[str] = typer.Option(None, help="키 접두사 필터 (예: O365_folders)"),
):
    """저장된 체크포인트 목록을 조회합니다."""

    async def _list():
        try:
            async with open_checkpoint_session(get_config()) as session:
                entries = await CheckpointRepositoryAdapter(session).list_entries(prefix)

                if not entries:
                    console.print("[yellow]저장된 체크포인트가 없습니다.[/yellow]")
                else:
                    table = Table(title="체크포인트 목록")
                    table.add_column("키", style="cyan")
                    table.add_column("델타 링크", style="green")

                    for entry in entries:
                        table.add_row(entry.key, _shorten(entry.value))

                    console.print(table)
                    console.print(f"총 {len(entries)}개")

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_list())


@app.command("show")
def show_checkpoint(
    key: str = typer.Argument(..., help="체크포인트 키"),
):
    """체크포인트 하나의 전체 값을 조회합니다."""

    async def _show():
        try:
            async with open_checkpoint_session(get_config()) as session:
                value = await CheckpointRepositoryAdapter(session).get(key)

            if value is None:
                console.print(f"[yellow]체크포인트를 찾을 수 없습니다: {key}[/yellow]")
                raise typer.Exit(1)

            console.print(f"[bold]키:[/bold] {key}")
            console.print(f"[bold]델타 링크:[/bold] {value or '(기준 동기화 대기)'}")

        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_show())


@app.command("seed")
def seed_checkpoint(
    key: str = typer.Argument(..., help="체크포인트 키 (예: O365_folders|<user_id>)"),
    value: str = typer.Option("", help="델타 링크 (비우면 기준 동기화)"),
    force: bool = typer.Option(False, "--force", help="기존 값 덮어쓰기"),
):
    """체크포인트 키를 직접 기록합니다."""

    async def _seed():
        try:
            parse_checkpoint_key(key)
        except MalformedCheckpointKeyError as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

        try:
            async with open_checkpoint_session(get_config(), create_tables=True) as session:
                repository = CheckpointRepositoryAdapter(session)
                if force:
                    await repository.put(key, value)
                    created = True
                else:
                    created = await repository.put_if_absent(key, value)

            if created:
                console.print(f"[green]✓ 체크포인트를 기록했습니다: {key}[/green]")
            else:
                console.print(f"[yellow]이미 존재하는 키입니다 (--force로 덮어쓰기): {key}[/yellow]")

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_seed())


@app.command("purge")
def purge_checkpoints(
    key: Optional[str] = typer.Option(None, help="삭제할 키"),
    prefix: Optional[str] = typer.Option(None, help="삭제할 키 접두사"),
    yes: bool = typer.Option(False, "--yes", "-y", help="확인 없이 삭제"),
):
    """체크포인트를 삭제합니다. 다음 동기화에서 해당 스코프는 다시 발견될 때 생성됩니다."""
    if bool(key) == bool(prefix):
        console.print("[red]오류: --key 또는 --prefix 중 하나를 지정해야 합니다.[/red]")
        raise typer.Exit(1)

    target = key or f"{prefix}*"
    if not yes and not typer.confirm(f"{target} 체크포인트를 삭제합니다. 계속하시겠습니까?"):
        console.print("[yellow]취소되었습니다.[/yellow]")
        return

    async def _purge():
        try:
            async with open_checkpoint_session(get_config()) as session:
                repository = CheckpointRepositoryAdapter(session)
                if key:
                    deleted = 1 if await repository.delete(key) else 0
                else:
                    deleted = await repository.delete_by_prefix(prefix)

            console.print(f"[green]✓ {deleted}개의 체크포인트를 삭제했습니다.[/green]")

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_purge())
