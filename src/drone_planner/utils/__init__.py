"""utils - 通用工具（随机种子、阶段计时）"""

from .seed import make_seed, make_rng
from .timing import Timer

__all__ = ["make_seed", "make_rng", "Timer"]
