"""
配置管理模块
加载 config/config.json 与 config/.env，缺省项使用 DEFAULTS
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv


DEFAULTS: Dict[str, Any] = {
    'default_keyword': '螺钿',
    'trend_days': 30,
    'random_seed': None,
    'playback_interval_ms': 200,
    'insight_model': 'gemini-3-flash-preview',
    'insight_timeout': 10.0,
    'insight_offline': True,
    'insight_context_limit': 3000,
    'log_level': 'INFO',
}

ENV_KEYS = ('GOOGLE_API_KEY',)


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Optional[str] = None, env_path: Optional[str] = None):
        """
        初始化配置管理器

        Args:
            config_path: config.json文件路径，默认为项目根目录/config/config.json
            env_path: .env文件路径，默认为项目根目录/config/.env
        """
        self.project_root = Path(__file__).parent.parent.parent
        self.config_path = Path(config_path) if config_path else self.project_root / "config" / "config.json"
        self.env_path = Path(env_path) if env_path else self.project_root / "config" / ".env"

        self.config: Dict[str, Any] = {}
        self.env_vars: Dict[str, str] = {}

        self._load_config()
        self._load_env()

    def _load_config(self) -> None:
        if not self.config_path.exists():
            raise FileNotFoundError(f"配置文件不存在: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self.config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"配置文件格式错误: {e}")

        if not isinstance(self.config, dict):
            raise ValueError(f"配置文件顶层必须是对象: {self.config_path}")

    def _load_env(self) -> None:
        # .env 不覆盖已存在的环境变量
        if self.env_path.exists():
            load_dotenv(self.env_path)
        self.env_vars = {key: os.getenv(key, '') for key in ENV_KEYS}

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值

        Args:
            key: 配置键，支持点号分隔的嵌套键
            default: 文件中缺失时的返回值（为None时回落到 DEFAULTS）

        Returns:
            配置值
        """
        value: Any = self.config
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return DEFAULTS.get(key) if default is None else default
        return value

    def get_env(self, key: str, default: str = '') -> str:
        return self.env_vars.get(key) or default

    def get_all(self) -> Dict[str, Any]:
        """返回合并缺省值后的完整配置"""
        return {**DEFAULTS, **self.config}

    def update(self, key: str, value: Any) -> None:
        """更新配置值（仅内存，不写回文件）"""
        *parents, leaf = key.split('.')
        node = self.config
        for k in parents:
            node = node.setdefault(k, {})
        node[leaf] = value

    def validation_errors(self) -> List[str]:
        """
        检查配置取值

        Returns:
            错误描述列表，为空表示配置有效
        """
        from commerce_pulse.data.keyword_profiles import is_known_keyword

        errors = []
        if not is_known_keyword(self.default_keyword):
            errors.append(f"默认关键词不在可选范围内: {self.default_keyword}")

        days = self.trend_days
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            errors.append(f"trend_days 必须为非负整数: {days}")

        seed = self.random_seed
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            errors.append(f"random_seed 必须为整数或null: {seed}")

        if not isinstance(self.playback_interval_ms, (int, float)) or self.playback_interval_ms <= 0:
            errors.append(f"playback_interval_ms 必须大于0: {self.playback_interval_ms}")

        if not isinstance(self.insight_timeout, (int, float)) or self.insight_timeout <= 0:
            errors.append(f"insight_timeout 必须大于0: {self.insight_timeout}")

        return errors

    def validate(self) -> bool:
        """
        验证配置并打印问题

        Returns:
            配置是否有效
        """
        errors = self.validation_errors()
        for error in errors:
            print(error)

        # 缺少密钥只是提示，洞察服务会回落到离线文案
        if not errors and not self.insight_offline and not self.google_api_key:
            print("未开启离线洞察且缺少环境变量: GOOGLE_API_KEY（将使用本地兜底文案）")

        return not errors

    @property
    def default_keyword(self) -> str:
        return self.get('default_keyword')

    @property
    def trend_days(self) -> int:
        return self.get('trend_days')

    @property
    def random_seed(self) -> Optional[int]:
        """随机种子（None表示使用系统熵源）"""
        return self.get('random_seed')

    @property
    def playback_interval_ms(self) -> int:
        return self.get('playback_interval_ms')

    @property
    def playback_interval(self) -> float:
        """回放帧间隔（秒）"""
        return self.playback_interval_ms / 1000

    @property
    def insight_model(self) -> str:
        return self.get('insight_model')

    @property
    def insight_timeout(self) -> float:
        return self.get('insight_timeout')

    @property
    def insight_offline(self) -> bool:
        return bool(self.get('insight_offline'))

    @property
    def insight_context_limit(self) -> int:
        """提示词中数据快照的最大字符数"""
        return self.get('insight_context_limit')

    @property
    def log_level(self) -> str:
        return self.get('log_level')

    @property
    def google_api_key(self) -> str:
        return self.get_env('GOOGLE_API_KEY')

    @property
    def logs_dir(self) -> Path:
        return self.project_root / "logs"


# 全局配置实例
_config_instance: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """获取全局配置实例（首次调用时按默认路径加载）"""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance


def init_config(config_path: Optional[str] = None, env_path: Optional[str] = None) -> ConfigManager:
    """
    按指定路径重新加载全局配置实例

    Args:
        config_path: config.json文件路径
        env_path: .env文件路径

    Returns:
        ConfigManager实例
    """
    global _config_instance
    _config_instance = ConfigManager(config_path, env_path)
    return _config_instance
