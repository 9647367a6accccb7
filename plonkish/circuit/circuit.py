"""
회로 작성자 인터페이스 (Circuit)
================================

회로 작성자는 Circuit을 상속해 두 가지를 구현한다.

  configure(cs)                  — 스키마 콜백. 열과 게이트를 등록하고
                                   이후 할당에 필요한 설정(config)을 돌려준다.
                                   회로 종류마다 한 번만 호출된다.
  synthesize(config, layouter)   — 할당 콜백. 영역을 열어 셀을 할당한다.
                                   키 생성과 위트니스 생성에서 모두 호출되며,
                                   단계는 layouter.phase로만 구분된다.

without_witnesses()는 키 생성에 쓸 "값이 없는" 회로를 돌려준다.
기본 구현은 자기 자신을 돌려준다 (키 생성 단계에서 advice 값은 어차피 무시된다).

사용 예시:
    >>> class MyCircuit(Circuit):
    ...     @classmethod
    ...     def configure(cls, cs):
    ...         a = cs.advice_column()
    ...         s = cs.selector()
    ...         cs.add_gate("bool", s, a.cur() * (a.cur() - 1))
    ...         return (a, s)
    ...
    ...     def synthesize(self, config, layouter):
    ...         a, s = config
    ...         with layouter.region("bit") as region:
    ...             region.enable_selector(s, 0)
    ...             region.assign_advice("a", a, 0, Value.known(1))
"""


class Circuit:
    """회로 작성자가 상속하는 기반 클래스."""

    @classmethod
    def configure(cls, cs):
        """열과 게이트를 등록하고 config를 반환한다.

        Args:
            cs: ConstraintSystem (스키마 빌더)

        Returns:
            synthesize()에 전달될 임의의 config 객체
        """
        raise NotImplementedError("configure()를 구현해야 합니다")

    def synthesize(self, config, layouter):
        """영역을 열고 셀을 할당한다.

        Args:
            config: configure()가 반환한 객체
            layouter: Layouter
        """
        raise NotImplementedError("synthesize()를 구현해야 합니다")

    def without_witnesses(self):
        """키 생성에 사용할 위트니스 없는 회로."""
        return self
