"""
评分设置
CLASSIC / PROPORTIONAL 两种K值模式，各自带完整参数集，通过 mode 显式选择
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class RankingMode(str, Enum):
    CLASSIC = 'CLASSIC'
    PROPORTIONAL = 'PROPORTIONAL'


@dataclass(frozen=True)
class ClassicParams:
    """阶梯K值: 分差达到阈值时K乘以奖励系数"""
    k_base: float = 12.0
    bonus_factor: float = 1.25
    margin_threshold: int = 7

    def effective_k(self, margin: int) -> float:
        if margin >= self.margin_threshold:
            return self.k_base * self.bonus_factor
        return self.k_base


@dataclass(frozen=True)
class ProportionalParams:
    """线性K值: 按分差线性增长，分差达到饱和值后封顶为 k_base * bonus_factor"""
    k_base: float = 12.0
    bonus_factor: float = 1.25
    saturation_margin: int = 10

    def effective_k(self, margin: int) -> float:
        ratio = min(margin / self.saturation_margin, 1)
        return self.k_base * (1 + ratio * (self.bonus_factor - 1))


ModeParams = Union[ClassicParams, ProportionalParams]


@dataclass(frozen=True)
class RankingSettings:
    """评分设置快照，每次评分计算时只读使用"""
    mode: RankingMode = RankingMode.CLASSIC
    classic: ClassicParams = field(default_factory=ClassicParams)
    proportional: ProportionalParams = field(default_factory=ProportionalParams)

    @classmethod
    def default(cls) -> 'RankingSettings':
        return cls()

    @property
    def active_params(self) -> ModeParams:
        if self.mode == RankingMode.PROPORTIONAL:
            return self.proportional
        return self.classic

    def effective_k(self, margin: int) -> float:
        return self.active_params.effective_k(margin)

    def get_validation_errors(self) -> List[str]:
        errors = []
        for name, params in (('classic', self.classic), ('proportional', self.proportional)):
            if params.k_base <= 0:
                errors.append(f"{name}.k_base 必须为正数: {params.k_base}")
            if params.bonus_factor < 1:
                errors.append(f"{name}.bonus_factor 不能小于1: {params.bonus_factor}")
        if self.classic.margin_threshold < 0:
            errors.append(f"classic.margin_threshold 不能为负数: {self.classic.margin_threshold}")
        if self.proportional.saturation_margin <= 0:
            errors.append(
                f"proportional.saturation_margin 必须为正数: {self.proportional.saturation_margin}"
            )
        return errors

    def validate(self) -> 'RankingSettings':
        errors = self.get_validation_errors()
        if errors:
            raise ValueError("评分设置无效: " + "; ".join(errors))
        return self

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'RankingSettings':
        """从配置字典构建设置，缺失字段使用默认值"""
        data = data or {}
        raw_mode = data.get('mode', RankingMode.CLASSIC.value)
        try:
            mode = RankingMode(str(raw_mode).upper())
        except ValueError:
            raise ValueError(f"不支持的评分模式: {raw_mode}")

        return cls(
            mode=mode,
            classic=ClassicParams(**_pick_fields(ClassicParams, data.get('classic'))),
            proportional=ProportionalParams(**_pick_fields(ProportionalParams, data.get('proportional'))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'classic': {f.name: getattr(self.classic, f.name) for f in fields(self.classic)},
            'proportional': {f.name: getattr(self.proportional, f.name) for f in fields(self.proportional)},
        }


def _pick_fields(params_cls, section: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not section:
        return {}
    known = {f.name: f for f in fields(params_cls)}
    unknown = set(section) - set(known)
    if unknown:
        raise ValueError(f"{params_cls.__name__} 存在未知参数: {', '.join(sorted(unknown))}")

    # 环境变量解析出的值是字符串，按默认值的类型转换
    picked = {}
    for name, value in section.items():
        caster = type(known[name].default)
        try:
            picked[name] = caster(value)
        except (TypeError, ValueError):
            raise ValueError(f"{params_cls.__name__}.{name} 的取值无效: {value!r}")
    return picked
