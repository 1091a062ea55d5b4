"""
经营洞察服务模块
根据看板数据快照生成3条中文洞察；远程调用 Google Gemini，失败时返回本地兜底文案

洞察服务不影响引擎状态，调用失败、超时或缺少密钥都不会向调用方抛出异常
"""

import asyncio
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from commerce_pulse.data.models import InsightProviderError
from commerce_pulse.utils.logger import get_logger
from commerce_pulse.utils.retry import retry_async


INSIGHT_COUNT = 3

# 离线演示文案
OFFLINE_INSIGHTS: List[str] = [
    "💡 趋势洞察: '螺钿'工艺品在25-30岁女性群体中关注度提升45%，建议加强小红书'国潮'标签投放。",
    "📦 产品机会: 结合环保材料的非遗文创（如再生纸漆器）搜索量环比上涨20%，市场存在空白。",
    "🎥 内容策略: 制作过程类ASMR视频在夜间时段完播率最高，建议增加微距特写镜头。"
]

# 远程调用失败时的本地兜底文案
FALLBACK_INSIGHTS: List[str] = [
    "本地分析: '螺钿'相关话题热度持续上升，建议增加短视频投稿量。",
    "本地分析: 3C数码类目在周五晚间直播转化率最高。",
    "本地分析: 建议结合'非遗'关键词进行跨界联名营销。"
]


class InsightProvider(ABC):
    """洞察服务基类"""

    @abstractmethod
    async def get_insights(self, snapshot: Dict[str, Any]) -> List[str]:
        """
        生成洞察

        Args:
            snapshot: 可JSON序列化的数据快照

        Returns:
            3条洞察文案
        """
        pass


class OfflineInsightProvider(InsightProvider):
    """离线洞察服务，返回固定演示文案"""

    def __init__(self, delay: float = 0.0):
        """
        Args:
            delay: 模拟的响应延迟（秒）
        """
        self.delay = delay

    async def get_insights(self, snapshot: Dict[str, Any]) -> List[str]:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return list(OFFLINE_INSIGHTS)


class GeminiInsightProvider(InsightProvider):
    """Gemini 洞察服务"""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-3-flash-preview",
        timeout: float = 10.0,
        context_limit: int = 3000,
        client: Any = None,
        max_attempts: int = 2,
        retry_delay: float = 0.5
    ):
        """
        初始化洞察服务

        Args:
            api_key: Google API密钥（为空时直接返回兜底文案）
            model: 使用的模型名称
            timeout: 整体超时（秒，含重试）
            context_limit: 提示词中数据快照的最大字符数
            client: 预先构建的客户端（测试注入）
            max_attempts: 最大尝试次数
            retry_delay: 重试初始间隔（秒）
        """
        self.logger = get_logger()
        self.model_name = model
        self.timeout = timeout
        self.context_limit = context_limit
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

        if client is not None:
            self.client = client
        elif api_key:
            self.client = genai.Client(api_key=api_key)
        else:
            self.client = None

    async def get_insights(self, snapshot: Dict[str, Any]) -> List[str]:
        """
        生成洞察，任何失败都返回兜底文案

        Args:
            snapshot: 数据快照

        Returns:
            3条洞察文案
        """
        if self.client is None:
            self.logger.warning("[Insight] 未配置GOOGLE_API_KEY，使用本地兜底文案")
            return list(FALLBACK_INSIGHTS)

        start = time.time()
        try:
            prompt = self._build_prompt(snapshot)
            insights = await asyncio.wait_for(self._request_with_retry(prompt), timeout=self.timeout)
            self.logger.log_api_call(f"Gemini/{self.model_name}", True, time.time() - start)
            return insights
        except asyncio.TimeoutError:
            self.logger.error(f"[Insight] 调用超时（{self.timeout}s），切换到离线文案")
        except Exception as e:
            self.logger.error(f"[Insight] Gemini 分析失败（切换到离线文案）: {e}")

        self.logger.log_api_call(f"Gemini/{self.model_name}", False, time.time() - start)
        return list(FALLBACK_INSIGHTS)

    async def _request_with_retry(self, prompt: str) -> List[str]:
        @retry_async(max_attempts=self.max_attempts, delay=self.retry_delay, backoff=2.0)
        async def _request() -> List[str]:
            return await self._request(prompt)

        return await _request()

    async def _request(self, prompt: str) -> List[str]:
        """调用 Gemini 并解析结果"""
        # Gemini SDK 为同步调用，在线程池中运行
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(response_mime_type="application/json")
            )
        )
        return self._parse_response(response.text)

    def _build_prompt(self, snapshot: Dict[str, Any]) -> str:
        """构建分析提示词"""
        context = json.dumps(snapshot, ensure_ascii=False)
        if len(context) > self.context_limit:
            context = context[:self.context_limit] + "...（已截断）"

        return f"""你是一名资深的中国市场商业分析师。
以下JSON数据是若干关键词（3C数码、非遗、潮玩等）的社媒趋势与电商表现。

数据: {context}

请用中文给出{INSIGHT_COUNT}条简洁、高价值的策略洞察，分别关注：
1. 抖音/小红书的内容策略建议
2. 非遗/螺钿品类的产品机会
3. 人群定向建议

以JSON字符串数组返回，例如 ["洞察1", "洞察2", "洞察3"]，不要使用markdown格式。
"""

    def _parse_response(self, response_text: Optional[str]) -> List[str]:
        """
        解析响应

        Raises:
            InsightProviderError: 响应为空、不是字符串数组或条数不足
        """
        if not response_text:
            raise InsightProviderError("响应为空")

        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise InsightProviderError(f"响应不是合法JSON: {e}")

        if not isinstance(data, list):
            raise InsightProviderError("响应不是数组")

        insights = [item.strip() for item in data if isinstance(item, str) and item.strip()]
        if len(insights) < INSIGHT_COUNT:
            raise InsightProviderError(f"洞察条数不足: {len(insights)}")

        return insights[:INSIGHT_COUNT]


def create_insight_provider(config) -> InsightProvider:
    """
    按配置创建洞察服务

    Args:
        config: ConfigManager

    Returns:
        离线模式或缺少密钥时为 OfflineInsightProvider，否则为 GeminiInsightProvider
    """
    if config.insight_offline or not config.google_api_key:
        return OfflineInsightProvider()

    return GeminiInsightProvider(
        api_key=config.google_api_key,
        model=config.insight_model,
        timeout=config.insight_timeout,
        context_limit=config.insight_context_limit
    )
