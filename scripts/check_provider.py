#!/usr/bin/env python
"""
Provider 연결 확인 스크립트.

작은 소스 파일 하나를 실제로 스트리밍 변환해서 청크 수/길이를 출력한다.

실행:
    uv run python scripts/check_provider.py
    uv run python scripts/check_provider.py --provider anthropic
"""

import argparse
import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

# .env 파일 로드
from dotenv import load_dotenv
load_dotenv()

from src.app.main import load_config  # noqa: E402
from src.app.providers import create_provider  # noqa: E402
from src.domain.errors import GenerationError  # noqa: E402
from src.domain.schemas import SourceFile  # noqa: E402

SAMPLE_FILE = SourceFile(
    name="counter.js",
    content=(
        "let count = 0;\n"
        "document.querySelector('#inc').onclick = () => {\n"
        "  count += 1;\n"
        "  document.querySelector('#value').textContent = count;\n"
        "};\n"
    ),
)


async def check(provider_name: str | None) -> bool:
    """Provider 스트리밍 호출 1회."""
    config = load_config()
    if provider_name:
        config.setdefault("ai", {})["provider"] = provider_name

    print("=" * 60)
    print(f"🧪 Provider 확인: {config.get('ai', {}).get('provider', 'gemini')}")
    print("=" * 60)

    try:
        provider = create_provider(config)
    except GenerationError as e:
        print(f"❌ Provider 생성 실패: {e.message}")
        return False

    chunks: list[str] = []

    print(f"📤 스트리밍 요청 전송 중 ({provider.model})...")
    try:
        model_used = await provider.generate_html_stream([SAMPLE_FILE], None, chunks.append)
    except GenerationError as e:
        print(f"❌ 생성 실패 [{e.code}]: {e.message}")
        return False

    html = "".join(chunks)
    print(f"📥 청크 {len(chunks)}개, {len(html)}자 수신 (model={model_used})")
    print(f"   미리보기: {html[:120]!r}")
    print("✅ 연결 성공!")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the configured generation provider")
    parser.add_argument(
        "--provider",
        choices=["gemini", "anthropic"],
        help="default.yaml의 ai.provider 대신 사용할 provider",
    )
    args = parser.parse_args()

    ok = asyncio.run(check(args.provider))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
