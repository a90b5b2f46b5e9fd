"""원격 저장소(Supabase) 오류 정의"""


class StoreError(Exception):
    """저장소 읽기/쓰기 실패 (네트워크/서버 오류)"""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"{operation} 실패"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class StoreTimeoutError(StoreError):
    """저장소 호출이 STORE_TIMEOUT_SECONDS를 초과함"""
