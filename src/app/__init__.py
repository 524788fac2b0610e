"""
App layer: UI 서버 (FastAPI + HTMX).

역할:
- 코드 붙여넣기, 파일 업로드, 참고 이미지, 세션 관리
- 모델 스트리밍 호출, 실시간 미리보기 UI
- 상태 전이 규칙 없음 (core에 위임)
"""
