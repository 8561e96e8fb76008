"""
Office 365 델타 동기화 엔진

메인 진입점 파일입니다.
"""

import asyncio
import typer
from rich.console import Console

from adapters.cli.checkpoint_commands import app as checkpoint_app
from adapters.cli.db_commands import app as db_app
from adapters.cli.graph_commands import app as graph_app
from adapters.cli.sync_commands import app as sync_app
from adapters.db.database import DatabaseAdapter
from config.adapters import get_config

# 메인 CLI 앱
app = typer.Typer(
    name="o365-delta-sync",
    help="Office 365 사용자/메일 폴더/메시지 델타 동기화 엔진",
    no_args_is_help=True,
)

# 서브 명령어 추가
app.add_typer(sync_app, name="sync")
app.add_typer(checkpoint_app, name="checkpoint")
app.add_typer(graph_app, name="graph")
app.add_typer(db_app, name="db")

console = Console()


@app.command("init-db")
def init_database(
    drop_existing: bool = typer.Option(False, "--drop", help="기존 테이블을 삭제하고 재생성"),
):
    """데이터베이스를 초기화합니다."""

    async def _init_db():
        try:
            config = get_config()
            console.print(f"[blue]환경: {config.get_environment()}[/blue]")
            console.print(f"[blue]데이터베이스: {config.get_database_url()}[/blue]")

            db_adapter = DatabaseAdapter(config)
            await db_adapter.initialize()

            if drop_existing:
                console.print("[yellow]기존 테이블을 삭제하는 중...[/yellow]")
                await db_adapter.drop_tables()

            console.print("[blue]데이터베이스 테이블을 생성하는 중...[/blue]")
            await db_adapter.create_tables()

            console.print("[green]✓ 데이터베이스가 성공적으로 초기화되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_init_db())


@app.command("version")
def show_version():
    """버전 정보를 표시합니다."""
    console.print("[bold]Office 365 델타 동기화 엔진[/bold]")
    console.print("버전: 1.0.0")


@app.command("config")
def show_config():
    """현재 설정을 표시합니다."""
    try:
        config = get_config()

        console.print("[bold]현재 설정[/bold]")
        console.print(f"환경: {config.get_environment()}")
        console.print(f"디버그 모드: {config.is_debug()}")
        console.print(f"데이터베이스 URL: {config.get_database_url()}")
        console.print(f"자격 증명 소스: {config.get_credential_source()}")
        console.print(f"Graph API URL: {config.get_graph_base_url()}")
        console.print(f"메시지 페이지 크기: {config.get_message_page_size()}")
        console.print(f"첨부파일 조회: {config.is_fetch_attachments()}")
        for scope_type, pattern in config.get_filter_regexes().items():
            console.print(f"{scope_type.value} 키 필터: {pattern}")
        console.print(f"출력 디렉터리: {config.get_output_dir()}")
        console.print(f"로그 레벨: {config.get_log_level()}")
        console.print(f"동기화 간격(분): {config.get_sync_interval_minutes()}")

    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
