"""进度估算模型。"""

from enum import Enum

from pydantic import BaseModel, Field

from .stats import _FormatPairQuery


class ProgressEstimationQuery(_FormatPairQuery):
    """耗时估算查询"""


class ProgressEstimation(BaseModel):
    """耗时估算结果"""

    estimated_duration_ms: int = Field(ge=0, description="预计耗时（毫秒）")
    confidence: float = Field(ge=0.0, le=1.0, description="置信度")
    sample_count: int = Field(ge=0, description="样本数量")


class EasingFunction(str, Enum):
    """缓动函数"""

    LINEAR = "linear"
    EASE_OUT = "ease_out"
    BEZIER = "bezier"


class ProgressConfig(BaseModel):
    """进度动画参数"""

    estimated_duration_ms: int = Field(1000, ge=0, description="预计耗时（毫秒）")
    update_interval_ms: int = Field(50, gt=0, description="刷新间隔（毫秒）")
    easing_function: EasingFunction = Field(EasingFunction.EASE_OUT)
    # 目前 BEZIER 使用二次近似，控制点仅保存
    bezier_control_points: tuple[float, float, float, float] | None = None
    completion_threshold: float = Field(
        95.0, gt=0.0, lt=100.0, description="真正完成前允许显示的最大百分比"
    )
