#!/usr/bin/env python3
"""
Test suite for the simulation engine.
Covers time advancement, spawning, coin collection, hits, the autonomous
dodge policy and lane interpolation. Lane choices are scripted, so every
test is deterministic.
"""

import random
import unittest

from subway_dash.core import engine as eng
from subway_dash.core.state import BASE_SPEED, MAX_SPEED, NUM_LANES

from helpers import ScriptedLanes, make_engine, place_runner


class TestSpeedAndScore(unittest.TestCase):

    def test_initial_state(self):
        state, _ = make_engine()
        self.assertEqual(state.speed, BASE_SPEED)
        self.assertEqual((state.runner_lane, state.target_lane, state.lane_x), (1, 1, 1.0))
        self.assertEqual((state.score, state.coins, state.hits), (0, 0, 0))

    def test_speed_ramps_then_caps(self):
        """Speed never decreases for dt in (0, 0.1] and holds at the cap."""
        state, engine = make_engine(0, 1, 2)
        rng = random.Random(3)
        previous = state.speed
        reached_cap = False
        for _ in range(6000):
            engine.advance(rng.uniform(0.01, 0.1))
            self.assertGreaterEqual(state.speed, previous)
            self.assertGreaterEqual(state.speed, BASE_SPEED)
            self.assertLessEqual(state.speed, MAX_SPEED)
            if reached_cap:
                self.assertEqual(state.speed, MAX_SPEED)
            reached_cap = reached_cap or state.speed == MAX_SPEED
            previous = state.speed
        self.assertTrue(reached_cap)

    def test_speed_follows_elapsed_time(self):
        state, engine = make_engine()
        engine.advance(0.1)
        self.assertAlmostEqual(state.speed, BASE_SPEED + 0.1 * eng.SPEED_RAMP)

    def test_score_uses_previous_tick_speed(self):
        state, engine = make_engine()
        engine.advance(0.1)
        self.assertEqual(state.score, int(BASE_SPEED * 0.1 * eng.SCORE_RATE))

    def test_score_and_scroll_never_decrease(self):
        state, engine = make_engine(2, 0, 1)
        last_score, last_scroll = 0, 0.0
        for _ in range(500):
            engine.advance(0.05)
            self.assertGreaterEqual(state.score, last_score)
            self.assertGreater(state.scroll_offset, last_scroll)
            last_score, last_scroll = state.score, state.scroll_offset


class TestMovementAndExpiry(unittest.TestCase):

    def test_obstacle_moves_toward_viewer(self):
        """Obstacle at lane 1, depth 10, advanced one second."""
        state, engine = make_engine()
        obs = state.obstacles.spawn(1, 10.0)
        engine.advance(1.0)
        self.assertTrue(obs.active)
        # Speed has already ramped to 6.05 when the obstacle moves
        self.assertAlmostEqual(obs.depth, 10.0 - state.speed)
        self.assertAlmostEqual(obs.depth, 4.0, delta=0.1)

    def test_obstacle_expires_below_minus_one(self):
        state, engine = make_engine()
        obs = state.obstacles.spawn(0, -0.8)
        engine.advance(0.1)
        self.assertFalse(obs.active)

    def test_no_active_entity_below_minus_one(self):
        state, engine = make_engine(0, 1, 2, 1, 0, 2)
        rng = random.Random(11)
        for _ in range(2000):
            engine.advance(rng.uniform(0.001, 0.1))
            for entity in list(state.obstacles.active()) + list(state.coin_pool.active()):
                self.assertGreaterEqual(entity.depth, eng.EXPIRE_DEPTH)


class TestCoinCollection(unittest.TestCase):

    def test_coin_in_runner_lane_is_collected(self):
        """Coin at lane 0, depth 1.0 with the runner in lane 0."""
        state, engine = make_engine()
        place_runner(state, 0)
        coin = state.coin_pool.spawn(0, 1.0)
        engine.advance(0.05)
        self.assertFalse(coin.active)
        self.assertEqual(state.coins, 1)
        self.assertEqual(state.score, int(BASE_SPEED * 0.05 * eng.SCORE_RATE) + eng.COIN_BONUS)

    def test_coin_is_only_counted_once(self):
        state, engine = make_engine()
        place_runner(state, 0)
        state.coin_pool.spawn(0, 1.0)
        for _ in range(20):
            engine.advance(0.05)
        self.assertEqual(state.coins, 1)

    def test_each_coin_in_trail_collected_separately(self):
        state, engine = make_engine()
        place_runner(state, 2)
        first = state.coin_pool.spawn(2, 1.0)
        second = state.coin_pool.spawn(2, 1.5)
        engine.advance(0.05)
        self.assertFalse(first.active)
        self.assertFalse(second.active)
        self.assertEqual(state.coins, 2)

    def test_coin_in_other_lane_passes_and_expires(self):
        state, engine = make_engine()
        place_runner(state, 1)
        coin = state.coin_pool.spawn(0, 1.0)
        engine.advance(0.05)
        self.assertTrue(coin.active)
        self.assertEqual(state.coins, 0)
        for _ in range(10):
            engine.advance(0.05)
        self.assertFalse(coin.active)
        self.assertEqual(state.coins, 0)

    def test_coin_beyond_collection_depth_waits(self):
        state, engine = make_engine()
        place_runner(state, 1)
        coin = state.coin_pool.spawn(1, 5.0)
        engine.advance(0.05)
        self.assertTrue(coin.active)
        self.assertEqual(state.coins, 0)


class TestHits(unittest.TestCase):

    def test_obstacle_reaching_runner_counts_one_hit(self):
        state, engine = make_engine()
        obs = state.obstacles.spawn(1, 1.2)
        engine.advance(0.05)
        self.assertTrue(obs.hit)
        self.assertTrue(obs.active)
        self.assertEqual(state.hits, 1)
        engine.advance(0.05)
        self.assertEqual(state.hits, 1)

    def test_fast_tick_jumping_the_window_still_hits(self):
        state, engine = make_engine()
        state.elapsed = 300.0
        obs = state.obstacles.spawn(1, 1.05)
        engine.advance(0.1)
        self.assertEqual(state.speed, MAX_SPEED)
        self.assertAlmostEqual(obs.depth, 1.05 - MAX_SPEED * 0.1)
        self.assertLess(obs.depth, 0.0)
        self.assertEqual(state.hits, 1)

    def test_hit_counted_on_the_tick_it_expires(self):
        state, engine = make_engine()
        state.elapsed = 300.0
        obs = state.obstacles.spawn(1, 0.5)
        engine.advance(0.1)
        self.assertFalse(obs.active)
        self.assertEqual(state.hits, 1)

    def test_obstacle_already_behind_runner_is_not_a_hit(self):
        state, engine = make_engine()
        obs = state.obstacles.spawn(1, -0.2)
        engine.advance(0.05)
        self.assertFalse(obs.hit)
        self.assertEqual(state.hits, 0)

    def test_obstacle_in_other_lane_is_not_a_hit(self):
        state, engine = make_engine()
        obs = state.obstacles.spawn(2, 1.2)
        engine.advance(0.05)
        self.assertFalse(obs.hit)
        self.assertEqual(state.hits, 0)


class TestSpawning(unittest.TestCase):

    def test_spawn_interval_shrinks_and_floors(self):
        self.assertAlmostEqual(eng.spawn_interval(6.0), 2.0 - 6.0 * 0.06)
        self.assertAlmostEqual(eng.spawn_interval(16.0), 2.0 - 16.0 * 0.06)
        self.assertEqual(eng.spawn_interval(100.0), eng.SPAWN_INTERVAL_MIN)
        self.assertGreater(eng.spawn_interval(6.0), eng.spawn_interval(12.0))

    def test_spawns_obstacle_and_coin_trail_when_timers_elapse(self):
        state, engine = make_engine(2, 0)
        engine.advance(1.7)

        obstacles = list(state.obstacles.active())
        self.assertEqual(len(obstacles), 1)
        self.assertEqual(obstacles[0].lane, 2)
        self.assertEqual(obstacles[0].depth, float(eng.SPAWN_DEPTH))
        self.assertAlmostEqual(state.spawn_timer, 1.7 - eng.spawn_interval(state.speed))

        coins = list(state.coin_pool.active())
        self.assertEqual([c.lane for c in coins], [0, 0, 0])
        self.assertEqual([c.depth for c in coins], [19.0, 20.5, 22.0])
        self.assertAlmostEqual(state.coin_timer, 1.7 - eng.COIN_INTERVAL)

    def test_no_spawn_before_interval(self):
        state, engine = make_engine()
        engine.advance(0.5)
        self.assertEqual(state.obstacles.active_count, 0)
        self.assertEqual(state.coin_pool.active_count, 0)

    def test_full_obstacle_pool_skips_spawn(self):
        state, engine = make_engine(1)
        for _ in range(len(state.obstacles)):
            self.assertTrue(engine.spawn_obstacle())
        self.assertFalse(engine.spawn_obstacle())
        self.assertEqual(state.obstacles.active_count, len(state.obstacles))

    def test_coin_trail_fills_what_it_can(self):
        state, engine = make_engine(0)
        for _ in range(len(state.coin_pool) - 1):
            state.coin_pool.spawn(1, 10.0)
        self.assertEqual(engine.spawn_coin_trail(), 1)
        self.assertEqual(engine.spawn_coin_trail(), 0)
        self.assertTrue(state.coin_pool.is_full)

    def test_spawn_lanes_come_from_injected_source(self):
        lanes = ScriptedLanes(2)
        state, engine = make_engine()
        engine._rng = lanes
        engine.spawn_obstacle()
        engine.spawn_coin_trail()
        self.assertEqual(lanes.calls, 2)
        self.assertEqual({o.lane for o in state.obstacles.active()}, {2})
        self.assertEqual({c.lane for c in state.coin_pool.active()}, {2})


class TestDodge(unittest.TestCase):
    """The autonomous lane choice."""

    def test_danger_window_is_open_interval(self):
        state, engine = make_engine()
        state.obstacles.spawn(0, 0.0)
        state.obstacles.spawn(1, eng.DODGE_LOOKAHEAD)
        state.obstacles.spawn(2, eng.DODGE_LOOKAHEAD - 0.1)
        self.assertEqual(engine.danger_lanes(), [False, False, True])

    def test_all_lanes_dangerous_keeps_target(self):
        state, engine = make_engine()
        for lane in range(NUM_LANES):
            state.obstacles.spawn(lane, 5.0)
        self.assertEqual(state.target_lane, 1)
        engine.dodge()
        self.assertEqual(state.target_lane, 1)

    def test_safe_target_ignores_coins_elsewhere(self):
        state, engine = make_engine()
        state.obstacles.spawn(0, 5.0)
        state.coin_pool.spawn(2, 4.0)
        engine.dodge()
        self.assertEqual(state.target_lane, 1)

    def test_falls_back_to_first_safe_lane(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 5.0)
        self.assertEqual(engine.choose_lane(), 0)

    def test_prefers_safe_lane_with_coin(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 5.0)
        state.coin_pool.spawn(2, 6.0)
        self.assertEqual(engine.choose_lane(), 2)

    def test_last_coin_lane_in_scan_order_wins(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 5.0)
        state.coin_pool.spawn(0, 3.0)
        state.coin_pool.spawn(2, 7.0)
        self.assertEqual(engine.choose_lane(), 2)

    def test_coin_in_dangerous_lane_is_ignored(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 5.0)
        state.obstacles.spawn(2, 5.0)
        state.coin_pool.spawn(2, 3.0)
        self.assertEqual(engine.choose_lane(), 0)

    def test_far_coin_does_not_attract(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 5.0)
        state.coin_pool.spawn(2, eng.DODGE_LOOKAHEAD + 1.0)
        self.assertEqual(engine.choose_lane(), 0)

    def test_advance_runs_dodge(self):
        state, engine = make_engine()
        state.obstacles.spawn(1, 6.0)
        engine.advance(0.01)
        self.assertEqual(state.target_lane, 0)


class TestLaneInterpolation(unittest.TestCase):

    def test_lane_x_slides_then_commits(self):
        state, engine = make_engine()
        state.target_lane = 2

        engine.advance(0.05)
        self.assertAlmostEqual(state.lane_x, 1.4)
        self.assertEqual(state.runner_lane, 1)

        engine.advance(0.05)
        engine.advance(0.05)
        self.assertEqual(state.lane_x, 2.0)
        self.assertEqual(state.runner_lane, 1)

        engine.advance(0.05)
        self.assertEqual(state.runner_lane, 2)

    def test_lane_x_never_overshoots_target(self):
        state, engine = make_engine()
        state.target_lane = 0
        engine.advance(0.1)
        self.assertAlmostEqual(state.lane_x, 0.2)
        engine.advance(0.1)
        self.assertGreaterEqual(state.lane_x, 0.0)

    def test_runner_lane_changes_only_on_snap(self):
        state, engine = make_engine(0, 1, 2)
        rng = random.Random(5)
        for _ in range(1500):
            before = state.runner_lane
            engine.advance(rng.uniform(0.01, 0.1))
            if state.runner_lane != before:
                self.assertEqual(state.lane_x, float(state.runner_lane))
                self.assertEqual(state.runner_lane, state.target_lane)
            self.assertIn(state.runner_lane, range(NUM_LANES))
            self.assertIn(state.target_lane, range(NUM_LANES))


class TestResizeAndReset(unittest.TestCase):

    def test_resize_stores_dimensions(self):
        state, engine = make_engine()
        engine.resize(120, 40)
        self.assertEqual((state.width, state.height), (120, 40))

    def test_resize_clamps_to_one_cell(self):
        state, engine = make_engine()
        engine.resize(0, -3)
        self.assertEqual((state.width, state.height), (1, 1))

    def test_reset_restores_start_of_run(self):
        state, engine = make_engine(0, 1, 2)
        for _ in range(200):
            engine.advance(0.1)
        engine.reset()
        self.assertEqual(state.speed, BASE_SPEED)
        self.assertEqual((state.score, state.coins, state.hits), (0, 0, 0))
        self.assertEqual(state.elapsed, 0.0)
        self.assertEqual(state.obstacles.active_count, 0)
        self.assertEqual(state.coin_pool.active_count, 0)
        self.assertEqual((state.width, state.height), (80, 24))

    def test_summary_reports_counters(self):
        state, engine = make_engine()
        state.score, state.coins, state.hits = 120, 3, 1
        state.elapsed = 12.3456
        summary = state.summary()
        self.assertEqual(summary["score"], 120)
        self.assertEqual(summary["coins"], 3)
        self.assertEqual(summary["hits"], 1)
        self.assertEqual(summary["elapsed"], 12.35)


if __name__ == "__main__":
    unittest.main()
