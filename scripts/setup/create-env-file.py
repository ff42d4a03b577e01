#!/usr/bin/env python3
"""로컬 개발용 .env 파일 생성 (Gemini 키는 직접 입력)"""
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent.parent
env_file = project_root / ".env"

env_content = """# Gemini
GEMINI_API_KEY=<GEMINI_API_KEY>
GEMINI_MODEL=gemini-2.5-flash

# CORS
ALLOWED_ORIGINS=http://localhost:3000,http://localhost:5173

# Upload / generation limits
MAX_FILE_SIZE_MB=20
GENERATION_TIMEOUT_SECONDS=300

# Environment
# development: 상세 에러 메시지 노출, production: 일반 메시지만
ENVIRONMENT=development
"""


def create_env_file(overwrite: bool = False):
    """.env 파일 생성 (UTF-8, LF 줄바꿈)"""
    if env_file.exists() and not overwrite:
        print(f"[SKIP] 이미 존재함: {env_file} (덮어쓰려면 --force)")
        return

    if env_file.exists():
        backup_file = project_root / ".env.backup"
        print(f"[INFO] 기존 .env 파일 백업: {backup_file}")
        backup_file.write_text(env_file.read_text(encoding="utf-8"), encoding="utf-8")

    with open(env_file, "w", encoding="utf-8", newline="\n") as f:
        f.write(env_content)
    print(f"[OK] .env 파일 생성 완료: {env_file}")

    if os.name != "nt":
        os.chmod(env_file, 0o600)


if __name__ == "__main__":
    try:
        create_env_file(overwrite="--force" in sys.argv[1:])
    except OSError as e:
        print(f"[ERROR] {e.__class__.__name__}: {e}")
        sys.exit(1)
