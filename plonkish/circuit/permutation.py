"""
복사 제약 추적기 (Equality / Copy Constraint Tracker)
=====================================================

게이트는 한 행 근처의 셀만 연결할 수 있다. 서로 다른 영역의 셀이
"같은 값"을 가져야 한다는 사실은 복사 제약으로 따로 기록한다.

  영역 0: c₀ ────┐
                 ├── constrain_equal(c₀, a₁)
  영역 1: a₁ ────┘

**기록 방식**:
  복사 제약은 순서 없는 셀 쌍의 목록으로 저장된다. 셀은
  (영역 번호, 오프셋)으로 기록되므로 배치 전략과 무관하다.
  배치가 끝나면 resolve()로 절대 (열, 행) 쌍으로 바꾼다.

**백엔드 관점**:
  백엔드는 쌍들의 추이적 폐포, 즉 동치류(equivalence class)를 증명한다.
  build_sigma()는 각 동치류를 하나의 순환(cycle)으로 잇는 순열 σ를
  만든다. 이 σ가 순열 인자(permutation argument)의 입력이다.
"""

from plonkish.circuit.errors import (
    EqualityNotEnabledError,
    SynthesisError,
    UnknownColumnError,
)


class EqualityTracker:
    """하나의 할당 패스에서 복사 제약을 모은다."""

    def __init__(self, schema):
        self.schema = schema
        self.pairs = []
        self._seen = set()

    def constrain_equal(self, left, right):
        """두 셀이 같은 값을 갖도록 제약한다.

        Args:
            left, right: Cell (영역 상대 또는 절대)

        Raises:
            UnknownColumnError: 스키마에 없는 열
            EqualityNotEnabledError: equality가 꺼진 열
        """
        self.check(left, right)

        # 정확히 같은 쌍의 중복만 제거한다
        key = frozenset((left, right))
        if key in self._seen:
            return
        self._seen.add(key)
        self.pairs.append((left, right))

    def check(self, *cells):
        """셀들이 복사 제약에 참여할 수 있는지 검사한다."""
        for cell in cells:
            if not self.schema.contains(cell.column):
                raise UnknownColumnError(cell.column, "constrain_equal")
            if not self.schema.is_equality_enabled(cell.column):
                raise EqualityNotEnabledError(cell.column)

    def resolve(self, region_starts):
        """영역 시작 행으로 모든 쌍을 절대 셀 쌍으로 변환한다.

        Args:
            region_starts: {영역 번호: 시작 행}

        Raises:
            SynthesisError: 배치되지 않은 영역의 셀을 참조할 때
        """
        resolved = []
        for left, right in self.pairs:
            for cell in (left, right):
                if not cell.is_absolute and cell.region_index not in region_starts:
                    raise SynthesisError(f"배치되지 않은 영역의 셀입니다: {cell!r}")
            resolved.append((left.resolve(region_starts), right.resolve(region_starts)))
        return resolved

    def __len__(self):
        return len(self.pairs)


def equivalence_classes(pairs):
    """절대 셀 쌍 목록에서 동치류를 계산한다 (union-find).

    Args:
        pairs: (Cell, Cell) 목록

    Returns:
        list[list[Cell]]: 크기 2 이상의 동치류. 각 동치류와 전체 목록은 정렬되어 있다.
    """
    parent = {}

    def find(cell):
        parent.setdefault(cell, cell)
        root = cell
        while parent[root] != root:
            root = parent[root]
        # 경로 압축
        while parent[cell] != root:
            parent[cell], cell = root, parent[cell]
        return root

    for left, right in pairs:
        root_l, root_r = find(left), find(right)
        if root_l != root_r:
            # 더 작은 셀을 대표로 두어 결과를 결정적으로 만든다
            if root_r < root_l:
                root_l, root_r = root_r, root_l
            parent[root_r] = root_l

    groups = {}
    for cell in parent:
        groups.setdefault(find(cell), []).append(cell)

    classes = [sorted(cells) for cells in groups.values() if len(cells) > 1]
    classes.sort(key=lambda cells: cells[0])
    return classes


def build_sigma(pairs):
    """복사 제약 순열 σ를 구성한다.

    각 동치류 [c₀, c₁, ..., c_m]를 순환 c₀ → c₁ → ... → c_m → c₀으로 잇는다.
    동치류에 속하지 않는 셀은 자기 자신으로 가므로 생략한다.

    Args:
        pairs: 절대 (Cell, Cell) 목록

    Returns:
        dict[Cell, Cell]: sigma[cell] = 같은 순환의 다음 셀

    예시:
        (x, y), (y, z) → {x: y, y: z, z: x}
    """
    sigma = {}
    for cells in equivalence_classes(pairs):
        for i, cell in enumerate(cells):
            sigma[cell] = cells[(i + 1) % len(cells)]
    return sigma
