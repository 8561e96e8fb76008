"""
데이터베이스 관리 CLI 명령어

체크포인트 저장소 데이터베이스 초기화, 리셋, 현황 조회를 위한 CLI 명령어입니다.
"""

import asyncio
import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import text

from core.domain.checkpoint_keys import KEY_PREFIXES
from adapters.db.database import DatabaseAdapter, open_checkpoint_session
from config.adapters import get_config

# CLI 앱 생성
app = typer.Typer(name="db", help="데이터베이스 관리 명령어")
console = Console()


@app.command("init")
def init_database():
    """데이터베이스를 초기화합니다."""

    async def _init():
        try:
            console.print("[blue]데이터베이스 초기화 시작...[/blue]")

            db_adapter = DatabaseAdapter(get_config())
            await db_adapter.initialize()
            await db_adapter.create_tables()

            console.print("[green]✓ 데이터베이스 초기화가 완료되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_init())


@app.command("reset")
def reset_database():
    """데이터베이스를 리셋합니다. (모든 체크포인트 삭제)"""

    confirm = typer.confirm("모든 체크포인트가 삭제되고 다음 동기화는 기준 동기화부터 시작합니다. 계속하시겠습니까?")
    if not confirm:
        console.print("[yellow]취소되었습니다.[/yellow]")
        return

    async def _reset():
        try:
            console.print("[blue]데이터베이스 리셋 시작...[/blue]")

            db_adapter = DatabaseAdapter(get_config())
            await db_adapter.initialize()
            await db_adapter.reset()

            console.print("[green]✓ 데이터베이스 리셋이 완료되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_reset())


@app.command("stats")
def show_stats():
    """스코프 타입별 체크포인트 수를 조회합니다."""

    async def _stats():
        try:
            async with open_checkpoint_session(get_config()) as session:
                table = Table(title="체크포인트 현황")
                table.add_column("스코프 타입", style="cyan")
                table.add_column("키 접두사", style="green")
                table.add_column("전체", justify="right")
                table.add_column("기준 동기화 대기", justify="right", style="yellow")

                for scope_type, prefix in KEY_PREFIXES.items():
                    result = await session.execute(
                        text(
                            "SELECT COUNT(*) AS total, "
                            "SUM(CASE WHEN value = '' THEN 1 ELSE 0 END) AS pending "
                            "FROM checkpoints WHERE key = :prefix OR key LIKE :pattern"
                        ),
                        {"prefix": prefix, "pattern": f"{prefix}|%"},
                    )
                    row = result.one()
                    table.add_row(scope_type.value, prefix, str(row.total), str(row.pending or 0))

                console.print(table)

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_stats())


if __name__ == "__main__":
    app()
