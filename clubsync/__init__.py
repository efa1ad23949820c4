"""XPoker 클럽 주간 정산 동기화 (Google Sheets → Notion)"""

__version__ = "0.3.0"
