"""
Graph API 단발 호출 CLI 명령어

임의 엔드포인트 호출과 메일 발송을 CLI 명령으로 노출합니다.
"""

import asyncio
import json
from typing import List, Optional

import typer
from rich.console import Console

from adapters.factory import get_adapter_factory

# CLI 앱 생성
app = typer.Typer(name="graph", help="Graph API 호출 명령어")
console = Console()


def _parse_pairs(pairs: Optional[List[str]], option: str) -> dict:
    """name=value 형식의 옵션 목록을 사전으로 변환합니다."""
    result = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"name=value 형식이어야 합니다: {pair}", param_hint=option)
        result[name] = value
    return result


@app.command("call")
def call_endpoint(
    path: str = typer.Argument(..., help="엔드포인트 경로 (예: /users/{id}/messages) 또는 절대 URL"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP 메서드 (GET, PUT, POST, DELETE, PATCH)"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON 본문"),
    select: Optional[str] = typer.Option(None, "--select", help="$select 필드 목록"),
    query: Optional[List[str]] = typer.Option(None, "--query", "-q", help="쿼리 옵션 (name=value, 반복 가능)"),
    header: Optional[List[str]] = typer.Option(None, "--header", "-H", help="추가 헤더 (name=value, 반복 가능)"),
):
    """임의의 Graph API 엔드포인트를 호출합니다."""
    params = _parse_pairs(query, "--query")
    headers = _parse_pairs(header, "--header")

    try:
        body = json.loads(data) if data else None
    except json.JSONDecodeError as e:
        console.print(f"[red]오류: JSON 본문을 해석할 수 없습니다: {str(e)}[/red]")
        raise typer.Exit(1)

    async def _call():
        usecase = get_adapter_factory().create_graph_passthrough_usecase()
        return await usecase.call_endpoint(
            method=method,
            path=path,
            params=params,
            headers=headers,
            body=body,
            select=select,
        )

    try:
        result = asyncio.run(_call())
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)

    if result is None:
        console.print("[green]✓ 요청이 완료되었습니다 (응답 본문 없음)[/green]")
    else:
        console.print_json(json.dumps(result, ensure_ascii=False))


@app.command("send-mail")
def send_mail(
    to: str = typer.Option(..., "--to", help="수신자 (쉼표로 구분)"),
    subject: str = typer.Option(..., "--subject", help="제목"),
    body: str = typer.Option(..., "--body", help="본문 내용"),
    cc: Optional[str] = typer.Option(None, "--cc", help="참조 수신자 (쉼표로 구분)"),
    bcc: Optional[str] = typer.Option(None, "--bcc", help="숨은참조 수신자 (쉼표로 구분)"),
    user_id: str = typer.Option("me", "--user-id", help="발신 사용자 ID"),
    body_type: str = typer.Option("HTML", "--body-type", help="본문 타입 (HTML, Text)"),
    save_to_sent_items: bool = typer.Option(True, "--save/--no-save", help="보낸 편지함 저장 여부"),
):
    """메일을 발송합니다."""

    async def _send():
        usecase = get_adapter_factory().create_graph_passthrough_usecase()
        await usecase.send_mail(
            subject=subject,
            body=body,
            to_recipients=to,
            cc_recipients=cc,
            bcc_recipients=bcc,
            user_id=user_id,
            body_type=body_type,
            save_to_sent_items=save_to_sent_items,
        )

    try:
        asyncio.run(_send())
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ 메일이 발송되었습니다![/green]")
