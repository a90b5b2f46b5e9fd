"""대화 세션/메모리 엔진 오류 정의

저장소 오류(StoreError)는 src.database.errors에 정의되어 있으며,
이 모듈의 오류는 엔진이 호출자(UI/API 레이어)에게 전달하는 신호입니다.
"""


class CompanionError(Exception):
    """엔진 오류 기본 클래스"""


class NotAuthenticatedError(CompanionError):
    """인증된 사용자 없음 - 유일하게 복구 불가능한(blocking) 오류"""


class SessionNotReadyError(CompanionError):
    """initialize 성공 전에 메시지 연산을 시도함"""


class MessageNotSentError(CompanionError):
    """메시지 저장 실패 - 낙관적 추가가 롤백됨 (재시도 가능)"""


class MessageSyncError(CompanionError):
    """메시지 수정/삭제/전체삭제 저장 실패 - 로컬 상태가 롤백됨 (재시도 가능)"""


class MessageNotFoundError(CompanionError):
    """오늘 메시지 목록에 해당 id가 없음"""
