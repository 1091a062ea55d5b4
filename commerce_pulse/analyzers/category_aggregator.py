"""
品类汇总分析器模块
将 品类 × 平台 销售记录折叠为按品类、按平台的汇总
"""

from typing import Callable, Dict, Iterable, List, Any

from commerce_pulse.data.models import SalesRecord, Rollup, SalesSummary
from commerce_pulse.utils.logger import get_logger


class CategoryAggregator:
    """
    销售记录汇总器

    纯折叠运算：输入顺序只影响结果的展示顺序（按键首次出现），不影响汇总值
    """

    def __init__(self):
        self.logger = get_logger()

    @staticmethod
    def _fold(records: Iterable[SalesRecord], key_func: Callable[[SalesRecord], str]) -> Dict[str, Rollup]:
        rollup: Dict[str, Rollup] = {}
        for record in records:
            key = key_func(record)
            rollup[key] = rollup.get(key, Rollup()).add(record)
        return rollup

    def aggregate_by_category(self, records: Iterable[SalesRecord]) -> Dict[str, Rollup]:
        """
        按品类汇总

        Args:
            records: 销售记录

        Returns:
            品类 -> Rollup，键顺序为首次出现顺序
        """
        return self._fold(records, lambda r: r.category)

    def aggregate_by_platform(self, records: Iterable[SalesRecord]) -> Dict[str, Rollup]:
        """
        按电商平台汇总

        Args:
            records: 销售记录

        Returns:
            平台名称 -> Rollup，键顺序为首次出现顺序
        """
        return self._fold(records, lambda r: r.platform.value)

    def summarize(self, records: List[SalesRecord]) -> SalesSummary:
        """计算销售总额与总销量"""
        summary = SalesSummary(
            total_revenue=sum(r.revenue for r in records),
            total_units=sum(r.units for r in records),
            record_count=len(records)
        )
        self.logger.debug(
            f"[CategoryAggregator] 汇总 {summary.record_count} 条记录: "
            f"销售额 {summary.total_revenue:.2f}, 销量 {summary.total_units:.2f}"
        )
        return summary


def rollup_to_series(rollup: Dict[str, Rollup], metric: str = 'revenue') -> List[Dict[str, Any]]:
    """
    将汇总结果转为图表序列

    Args:
        rollup: 汇总结果
        metric: 取值字段（revenue 或 units）

    Returns:
        [{'name': 键, 'value': 值}, ...]，保持汇总的键顺序
    """
    if metric not in ('revenue', 'units'):
        raise ValueError(f"不支持的汇总字段: {metric}")
    return [{'name': key, 'value': round(getattr(value, metric), 2)} for key, value in rollup.items()]


def aggregate_by_category(records: Iterable[SalesRecord]) -> Dict[str, Rollup]:
    """便捷函数：按品类汇总"""
    return CategoryAggregator().aggregate_by_category(records)


def aggregate_by_platform(records: Iterable[SalesRecord]) -> Dict[str, Rollup]:
    """便捷函数：按平台汇总"""
    return CategoryAggregator().aggregate_by_platform(records)


def summarize_sales(records: List[SalesRecord]) -> SalesSummary:
    """便捷函数：计算销售总额与总销量"""
    return CategoryAggregator().summarize(records)
