"""
영역 배치 전략 (Layout Planner)
===============================

영역(region)은 상대 행 0..height-1 을 갖는 셀 블록이다. 플래너는 영역이
닫힐 때마다 그 영역의 시작 절대 행을 정한다.

**LinearPlanner** (기본값):
  커서 하나를 단조 증가시키며 영역을 빈틈없이 쌓는다.

    영역 0 (h=1)  행 0
    영역 1 (h=1)  행 1
    영역 2 (h=3)  행 2..4
    ...

**ColumnPackingPlanner**:
  열마다 "다음 빈 행"(frontier)을 관리한다. 영역은 자신이 사용하는 모든 열의
  frontier 중 최댓값에서 시작한다. 서로 다른 열만 쓰는 영역끼리는 같은 행을
  공유할 수 있어 전체 높이가 줄어든다.

어느 전략이든 다음을 보존한다:
  (a) 영역 내부의 상대 오프셋은 바뀌지 않는다.
  (b) 서로 다른 영역의 셀이 같은 (열, 절대 행)에 놓이지 않는다.
  (c) 복사 제약은 (영역, 오프셋)으로 기록되므로 배치와 무관하게 해석된다.
두 전략 모두 결정적이므로 키 생성/위트니스 단계의 배치가 항상 같다.
"""


class RegionShape:
    """배치에 필요한 영역 정보.

    속성:
        index: 영역 번호 (생성 순서)
        name: 영역 이름
        height: 영역 높이 (행 수)
        columns: 영역이 차지하는 열의 frozenset
    """

    def __init__(self, index, name, height, columns):
        self.index = index
        self.name = name
        self.height = height
        self.columns = frozenset(columns)

    def __repr__(self):
        return f"RegionShape({self.index}, {self.name!r}, height={self.height})"


class Planner:
    """배치 전략의 기반 클래스. 할당 패스마다 새 인스턴스를 쓴다."""

    def place(self, shape):
        """영역의 시작 행을 반환한다."""
        raise NotImplementedError


class LinearPlanner(Planner):
    """단조 커서 배치: 각 영역을 직전 영역 바로 아래에 놓는다."""

    def __init__(self):
        self.cursor = 0

    def place(self, shape):
        start = self.cursor
        self.cursor += shape.height
        return start


class ColumnPackingPlanner(Planner):
    """열 단위 frontier 배치: 겹치지 않는 열을 쓰는 영역을 같은 행에 놓는다."""

    def __init__(self):
        self.frontier = {}

    def place(self, shape):
        start = max((self.frontier.get(c, 0) for c in shape.columns), default=0)
        end = start + shape.height
        for column in shape.columns:
            self.frontier[column] = end
        return start
