"""
PLONKish 오류 분류 (Error Taxonomy)
====================================

모든 오류는 하나의 할당 패스(assignment pass) 안에서만 의미를 가지며,
발생 즉시 패스를 중단시킨다. 오류가 난 패스는 위트니스 테이블을 만들지 않는다.

  CircuitError
  ├── SchemaError            (스키마 구성 시점)
  │   ├── UnknownColumnError
  │   ├── SchemaFinalizedError
  │   └── SelectorMisuseError
  └── SynthesisError         (할당 시점)
      ├── EqualityNotEnabledError
      ├── CellCollisionError
      ├── RegionBoundsError
      ├── RegionOverflowError
      ├── TableTooSmallError
      ├── WitnessMissingError
      ├── InstanceError
      ├── LayoutMismatchError
      └── UnsatisfiedConstraintError
"""


class CircuitError(Exception):
    """PLONKish 프론트엔드의 모든 오류의 기반 클래스."""


# ─────────────────────────────────────────────────────────────────────
# 스키마 구성 오류
# ─────────────────────────────────────────────────────────────────────

class SchemaError(CircuitError):
    """스키마(ConstraintSystem) 구성 중 발생하는 오류."""


class UnknownColumnError(SchemaError):
    """등록되지 않은 열을 참조했다.

    속성:
        column: 알 수 없는 열
        context: 참조가 발생한 위치 (게이트 이름 등)
    """

    def __init__(self, column, context=None):
        self.column = column
        self.context = context
        where = f" ({context})" if context else ""
        super().__init__(f"등록되지 않은 열입니다: {column!r}{where}")


class SchemaFinalizedError(SchemaError):
    """확정(finalize)된 스키마를 수정하려 했다."""

    def __init__(self, operation):
        self.operation = operation
        super().__init__(f"스키마가 이미 확정되었습니다: {operation}")


class SelectorMisuseError(SchemaError):
    """셀렉터를 허용되지 않는 방식으로 사용했다.

    - 게이트의 지배 셀렉터가 셀렉터 열이 아님
    - 셀렉터를 현재 행이 아닌 회전(rotation)으로 쿼리함
    - 단순 셀렉터를 다른 게이트의 제약식 안에서 사용함
    """

    def __init__(self, message, gate=None):
        self.gate = gate
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────
# 할당(synthesis) 오류
# ─────────────────────────────────────────────────────────────────────

class SynthesisError(CircuitError):
    """할당 패스 중 발생하는 오류."""


class EqualityNotEnabledError(SynthesisError):
    """equality가 활성화되지 않은 열에 복사 제약을 걸었다."""

    def __init__(self, column):
        self.column = column
        super().__init__(f"equality가 활성화되지 않은 열입니다: {column!r}")


class CellCollisionError(SynthesisError):
    """이미 값이 할당된 셀에 다시 할당하려 했다.

    속성:
        column: 충돌한 열
        row: 충돌한 행 (영역 기준 오프셋 또는 절대 행)
        region: 충돌이 발견된 영역 이름
    """

    def __init__(self, column, row, region=None):
        self.column = column
        self.row = row
        self.region = region
        where = f" (영역 '{region}')" if region else ""
        super().__init__(f"셀이 이미 할당되었습니다: {column!r} 행 {row}{where}")


class RegionBoundsError(SynthesisError):
    """영역 범위를 벗어난 오프셋을 사용했다.

    활성화된 게이트가 쿼리하는 모든 행은 그 게이트를 켠 영역 안에 있어야 한다.
    """

    def __init__(self, region, offset, message=None):
        self.region = region
        self.offset = offset
        super().__init__(message or f"영역 '{region}'의 범위를 벗어난 오프셋입니다: {offset}")


class RegionOverflowError(SynthesisError):
    """영역 하나의 높이가 테이블 높이 2^k보다 크다."""

    def __init__(self, region, height, n):
        self.region = region
        self.height = height
        self.n = n
        super().__init__(
            f"영역 '{region}'의 높이 {height}가 테이블 높이 {n}을 초과합니다"
        )


class TableTooSmallError(SynthesisError):
    """배치된 전체 행 수가 2^k를 초과한다.

    속성:
        region: 넘친 영역 이름
        required: 필요한 최소 행 수
        n: 사용 가능한 행 수 (2^k)
    """

    def __init__(self, region, required, n):
        self.region = region
        self.required = required
        self.n = n
        super().__init__(
            f"영역 '{region}'을 배치하려면 {required}행이 필요하지만 테이블은 {n}행입니다"
        )


class WitnessMissingError(SynthesisError):
    """위트니스 단계에서 값이 주어지지 않은(unknown) 셀을 할당하려 했다."""

    def __init__(self, name=None):
        self.name = name
        what = f" '{name}'" if name else ""
        super().__init__(f"위트니스 값이 없습니다{what}")


class InstanceError(SynthesisError):
    """공개 입력(instance) 열 값이 잘못되었다."""


class LayoutMismatchError(SynthesisError):
    """위트니스 단계의 배치가 키 생성 단계의 배치와 다르다."""

    def __init__(self, what):
        self.what = what
        super().__init__(f"키 생성 단계와 레이아웃이 다릅니다: {what}")


class UnsatisfiedConstraintError(SynthesisError):
    """활성 행에서 게이트 또는 복사 제약이 만족되지 않는다.

    속성:
        failures: 실패 목록 (plonkish.circuit.checker의 실패 객체)
    """

    def __init__(self, failures):
        self.failures = list(failures)
        lines = [str(f) for f in self.failures]
        super().__init__(
            f"제약 {len(self.failures)}개가 만족되지 않습니다:\n  " + "\n  ".join(lines)
        )
