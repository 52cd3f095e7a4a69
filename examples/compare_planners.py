#!/usr/bin/env python
"""
examples/compare_planners.py - A* / RRT 对比演示

在同一场景上分别运行网格 A* 和 RRT，输出两者的路径质量指标对比，
然后按时间回放其中一条路径并记录尾迹。

运行：
    python examples/compare_planners.py
    python examples/compare_planners.py --seed 123
    python examples/compare_planners.py --scene my_scene.json --config cfg.json
    python examples/compare_planners.py --output results.json
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path

import numpy as np

from drone_planner import (
    PlannerConfig,
    Scene,
    TrailTracker,
    TrajectoryPlayer,
    compare_results,
    default_scene,
    evaluate_result,
    format_comparison_table,
    run_comparison,
)

# ── 日志配置 ──────────────────────────────────────────────
LOG_FMT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FMT, datefmt="%H:%M:%S")
logger = logging.getLogger("compare_planners")


def replay(path, duration: float, n_frames: int) -> TrailTracker:
    """按 n_frames 个等间隔时刻回放路径，返回记录下的尾迹"""
    trail = TrailTracker()
    player = TrajectoryPlayer(path, duration=duration, trail=trail)
    for k in range(n_frames + 1):
        t = duration * k / n_frames
        pos = player.position_at(t)
        if pos is not None:
            logger.info("  t=%5.2fs  progress=%4.0f%%  pos=(%6.2f, %6.2f, %6.2f)",
                        t, player.progress(t) * 100, pos[0], pos[1], pos[2])
    logger.info("  回放结束: %s", "完成" if player.is_finished else "未完成")
    return trail


def main():
    parser = argparse.ArgumentParser(
        description="A* / RRT 三维路径规划对比演示")
    parser.add_argument("--seed", type=int, default=None,
                        help="RRT 随机种子 (默认: 随机)")
    parser.add_argument("--scene", type=str, default=None,
                        help="场景 JSON 文件 (默认: 内置 10 障碍物场景)")
    parser.add_argument("--config", type=str, default=None,
                        help="PlannerConfig JSON 文件")
    parser.add_argument("--start", type=float, nargs=3, default=None,
                        metavar=("X", "Y", "Z"), help="起点")
    parser.add_argument("--goal", type=float, nargs=3, default=None,
                        metavar=("X", "Y", "Z"), help="终点")
    parser.add_argument("--duration", type=float, default=5.0,
                        help="回放时长 (s, 默认: 5.0)")
    parser.add_argument("--frames", type=int, default=10,
                        help="回放帧数 (默认: 10)")
    parser.add_argument("--output", type=str, default=None,
                        help="把两个规划结果写入 JSON 文件")
    args = parser.parse_args()

    rng_seed = args.seed if args.seed is not None else int(time.time()) % 100000
    rng = np.random.default_rng(rng_seed)

    scene, start, goal = default_scene()
    if args.scene:
        scene = Scene.from_json(args.scene)
    if args.start is not None:
        start = np.array(args.start)
    if args.goal is not None:
        goal = np.array(args.goal)
    config = PlannerConfig.from_json(args.config) if args.config else PlannerConfig()

    logger.info("=" * 60)
    logger.info("  A* / RRT 对比")
    logger.info("  随机种子: %d", rng_seed)
    logger.info("  场景: %s", scene)
    logger.info("  起点: %s  终点: %s", start.tolist(), goal.tolist())
    logger.info("=" * 60)

    results = run_comparison(start, goal, scene, config=config, rng=rng)

    obstacles = scene.get_obstacles()
    metrics = {name: evaluate_result(r, obstacles) for name, r in results.items()}
    print(format_comparison_table(metrics))

    cmp = compare_results(results["astar"], results["rrt"])
    logger.info("路径更短: %s (短 %.1f%%)", cmp['shorter_path'], cmp['length_diff_percent'])
    logger.info("耗时更少: %s", cmp['faster'])
    logger.info("探索更少: %s", cmp['fewer_nodes'])

    best = next((results[n] for n in ("astar", "rrt") if results[n].success), None)
    if best is None:
        logger.warning("两种算法都没有找到路径，跳过回放")
    else:
        logger.info("")
        logger.info("▶ 回放 %s 路径 (%d 个路径点)", best.algorithm, best.n_waypoints)
        trail = replay(best.path, args.duration, args.frames)
        smoothed = trail.get_smoothed_trail()
        logger.info("  尾迹 %d 个点, 平滑后 %d 个点", len(trail), len(smoothed))

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, 'w', encoding='utf-8') as f:
            json.dump({
                'seed': rng_seed,
                'config': config.to_dict(),
                'results': {n: r.to_dict() for n, r in results.items()},
                'comparison': cmp,
            }, f, indent=2, ensure_ascii=False)
        logger.info("结果已保存: %s", out)


if __name__ == "__main__":
    main()
