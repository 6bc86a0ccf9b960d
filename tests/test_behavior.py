import math
import unittest

from ai.behavior import (
    BehaviorMode, BehaviorStateMachine, DashingPhase, Readiness, normalize,
)
from ai.ports import SeededRandom
from entities.orb import AIOrb, Orb
from settings import MATCH_MAX_DURATION, SPEED_BOOST_UNLOCK
from systems.ability_system import AbilityKind, AbilityRegistry
from systems.events import AbilityFired, EventLog, ModeChanged

NEUTRAL = (0.5, 0.5, 0.0, 0.0)


class MachineTestCase(unittest.TestCase):
    """Drives the state machine the same way the controller does."""

    progress_score = MATCH_MAX_DURATION

    def setUp(self) -> None:
        self.registry = AbilityRegistry()
        self.registry.update_progress(self.progress_score)
        self.log = EventLog()
        self.fsm = BehaviorStateMachine(self.registry, SeededRandom(1), self.log)
        self.body = AIOrb(400.0, 300.0)
        self.opponent = Orb(500.0, 300.0)

    def tick(self, now_ms: float, action=NEUTRAL, elapsed_ms: float = 16.0) -> None:
        ready = Readiness.sample(self.registry, now_ms)
        self.fsm.step(self.body, self.opponent, action, now_ms, elapsed_ms, ready)
        self.body.integrate()
        self.fsm.after_move(self.body)

    def fired(self, kind: AbilityKind) -> list[AbilityFired]:
        return [e for e in self.log.of_type(AbilityFired) if e.kind is kind]


class NormalMovementTests(MachineTestCase):
    def test_action_maps_to_velocity(self) -> None:
        self.tick(0, (1.0, 0.25, 0.0, 0.0))
        self.assertAlmostEqual(self.body.vx, 1.125)
        self.assertAlmostEqual(self.body.vy, -0.5625)
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)

    def test_projectile_fires_once_per_cooldown(self) -> None:
        shoot = (0.5, 0.5, 0.9, 0.0)
        self.opponent.vx, self.opponent.vy = 1.0, -0.5
        self.tick(1000, shoot)
        self.tick(1016, shoot)
        shots = self.fired(AbilityKind.PROJECTILE)
        self.assertEqual(len(shots), 1)
        self.assertEqual(shots[0].params["origin"], (400.0, 300.0))
        self.assertEqual(shots[0].params["target"], (520.0, 290.0))
        self.assertEqual(self.registry.state(AbilityKind.PROJECTILE).last_used_at_ms, 1000)

    def test_signal_at_threshold_does_not_fire(self) -> None:
        self.tick(0, (0.5, 0.5, 0.7, 0.8))
        self.assertEqual(self.fired(AbilityKind.PROJECTILE), [])
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)

    def test_dash_wins_over_beam_in_same_tick(self) -> None:
        self.registry.mark_used(AbilityKind.PROJECTILE, 0)
        self.tick(0, (1.0, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertIsNone(self.registry.state(AbilityKind.BEAM).last_used_at_ms)


class LockedAbilityTests(MachineTestCase):
    progress_score = 0.0

    def test_locked_dash_signal_is_ignored(self) -> None:
        self.tick(0, (1.0, 0.5, 0.0, 0.99))
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)
        self.assertIsNone(self.registry.state(AbilityKind.DASH).last_used_at_ms)

    def test_locked_beam_never_starts(self) -> None:
        self.registry.mark_used(AbilityKind.PROJECTILE, 0)
        self.tick(0)
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)


class DashTests(MachineTestCase):
    # Dash unlocked, speed boost and beam still locked.
    progress_score = MATCH_MAX_DURATION * (SPEED_BOOST_UNLOCK - 0.05)

    def setUp(self) -> None:
        super().setUp()
        self.body = AIOrb(100.0, 300.0)
        self.opponent = Orb(700.0, 300.0)

    def test_windup_then_fixed_distance(self) -> None:
        t0 = 10_000
        self.tick(t0, (1.0, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertEqual(self.fsm.dash_target, (300.0, 300.0))

        for now in (t0 + 16, t0 + 800, t0 + 1499):
            self.tick(now)
            self.assertEqual((self.body.vx, self.body.vy), (0.0, 0.0))
            self.assertEqual(self.body.x, 100.0)
            self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)

        now = t0 + 1500
        self.tick(now)
        self.assertIs(self.fsm.mode, BehaviorMode.DASHING)
        self.assertIsInstance(self.fsm.state.phase, DashingPhase)
        self.assertAlmostEqual(self.body.vx, 8.0)
        self.assertAlmostEqual(self.body.x, 108.0)

        for _ in range(24):
            now += 16
            self.tick(now)

        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)
        self.assertAlmostEqual(self.body.x, 300.0)
        self.assertAlmostEqual(self.body.y, 300.0)
        self.assertEqual((self.body.vx, self.body.vy), (0.0, 0.0))

        dashes = self.fired(AbilityKind.DASH)
        self.assertEqual(len(dashes), 1)
        self.assertEqual(dashes[0].params["distance"], 200.0)

    def test_mode_changes_are_reported(self) -> None:
        t0 = 0
        self.tick(t0, (1.0, 0.5, 0.0, 0.9))
        now = t0 + 1500
        for _ in range(25):
            self.tick(now)
            now += 16
        modes = [e.mode for e in self.log.of_type(ModeChanged)]
        self.assertEqual(modes, [BehaviorMode.DASH_WINDUP, BehaviorMode.DASHING,
                                 BehaviorMode.NORMAL])

    def test_dash_cooldown_starts_at_windup(self) -> None:
        self.tick(5000, (1.0, 0.5, 0.0, 0.9))
        self.assertEqual(self.registry.state(AbilityKind.DASH).last_used_at_ms, 5000)

    def test_zero_move_dashes_toward_opponent(self) -> None:
        self.opponent = Orb(100.0, 500.0)
        self.tick(0, (0.5, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertEqual(self.fsm.state.phase.direction, (0.0, 1.0))
        self.assertEqual(self.fsm.dash_target, (100.0, 500.0))

    def test_zero_move_on_top_of_opponent_dashes_right(self) -> None:
        self.opponent = Orb(100.0, 300.0)
        self.tick(0, (0.5, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertEqual(self.fsm.state.phase.direction, (1.0, 0.0))

    def test_target_uses_position_at_windup_start(self) -> None:
        self.tick(0, (1.0, 0.5, 0.0, 0.9))
        self.body.x = 150.0
        self.tick(1500)
        self.assertIs(self.fsm.mode, BehaviorMode.DASHING)
        self.assertEqual(self.fsm.dash_target, (300.0, 300.0))
        self.assertEqual(self.fired(AbilityKind.DASH)[0].params["target"], (300.0, 300.0))

        now = 1500
        for _ in range(30):
            if self.fsm.mode is BehaviorMode.NORMAL:
                break
            now += 16
            self.tick(now)
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)
        self.assertEqual(self.body.x, 300.0)


class BeamTests(MachineTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.t0 = 5000
        self.registry.mark_used(AbilityKind.PROJECTILE, self.t0)

    def test_beam_needs_projectile_on_cooldown(self) -> None:
        registry = AbilityRegistry()
        registry.update_progress(MATCH_MAX_DURATION)
        fsm = BehaviorStateMachine(registry, SeededRandom(1), EventLog())
        ready = Readiness.sample(registry, 0)
        fsm.step(self.body, self.opponent, NEUTRAL, 0, 16, ready)
        self.assertIs(fsm.mode, BehaviorMode.NORMAL)

    def test_beam_out_of_range_does_not_start(self) -> None:
        self.opponent.x = 750.0
        self.tick(self.t0)
        self.assertIsNot(self.fsm.mode, BehaviorMode.BEAM_WINDUP)

    def test_aim_tracks_then_freezes(self) -> None:
        t0 = self.t0
        self.tick(t0)
        self.assertIs(self.fsm.mode, BehaviorMode.BEAM_WINDUP)
        first = self.fsm.beam_direction

        self.opponent.x, self.opponent.y = 400.0, 500.0
        self.tick(t0 + 400)
        tracked = self.fsm.beam_direction
        self.assertNotAlmostEqual(first[1], tracked[1], places=2)
        self.assertGreater(tracked[1], 0.9)

        self.opponent.x, self.opponent.y = 300.0, 300.0
        self.tick(t0 + 1200)
        locked = self.fsm.beam_direction
        self.assertTrue(self.fsm.state.phase.locked)
        self.assertEqual(locked, tracked)

        self.opponent.x, self.opponent.y = 400.0, 100.0
        self.tick(t0 + 1800)
        self.assertEqual(self.fsm.beam_direction, locked)
        self.assertEqual((self.body.vx, self.body.vy), (0.0, 0.0))

        self.tick(t0 + 2000)
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)
        beams = self.fired(AbilityKind.BEAM)
        self.assertEqual(len(beams), 1)
        self.assertEqual(beams[0].params["direction"], locked)
        self.assertEqual(beams[0].params["origin"], (400.0, 300.0))
        self.assertEqual(beams[0].params["width"], 6.0)
        self.assertEqual(self.registry.state(AbilityKind.BEAM).last_used_at_ms, t0 + 2000)

    def test_aim_is_unit_length(self) -> None:
        self.tick(self.t0)
        dx, dy = self.fsm.beam_direction
        self.assertAlmostEqual(math.hypot(dx, dy), 1.0)

    def test_zero_distance_aim_keeps_previous_direction(self) -> None:
        t0 = self.t0
        self.opponent.x, self.opponent.y = 400.0, 300.0
        self.tick(t0)
        self.assertIs(self.fsm.mode, BehaviorMode.BEAM_WINDUP)
        self.assertEqual(self.fsm.beam_direction, (1.0, 0.0))

        self.tick(t0 + 200)
        self.assertEqual(self.fsm.beam_direction, (1.0, 0.0))

        self.opponent.y = 500.0
        self.tick(t0 + 400)
        tracked = self.fsm.beam_direction
        self.assertGreater(tracked[1], 0.9)

        self.opponent.y = 300.0
        self.tick(t0 + 600)
        self.assertEqual(self.fsm.beam_direction, tracked)


class TriggerSuspensionTests(MachineTestCase):
    SHOOT_AND_DASH = (0.5, 0.5, 0.9, 0.9)

    def test_no_shot_during_dash_windup_or_dash(self) -> None:
        self.tick(0, (1.0, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)

        self.tick(16, self.SHOOT_AND_DASH)
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.tick(1500, self.SHOOT_AND_DASH)
        self.assertIs(self.fsm.mode, BehaviorMode.DASHING)
        self.tick(1516, self.SHOOT_AND_DASH)
        self.assertIs(self.fsm.mode, BehaviorMode.DASHING)

        self.assertEqual(self.fired(AbilityKind.PROJECTILE), [])
        self.assertIsNone(self.registry.state(AbilityKind.PROJECTILE).last_used_at_ms)
        self.assertEqual(self.registry.state(AbilityKind.DASH).last_used_at_ms, 0)

    def test_no_shot_or_dash_during_beam_windup(self) -> None:
        # Projectile comes off cooldown halfway through the windup.
        self.registry.mark_used(AbilityKind.PROJECTILE, 2500)
        self.tick(5000)
        self.assertIs(self.fsm.mode, BehaviorMode.BEAM_WINDUP)

        self.tick(6000, self.SHOOT_AND_DASH)
        self.assertIs(self.fsm.mode, BehaviorMode.BEAM_WINDUP)
        self.assertEqual(self.fired(AbilityKind.PROJECTILE), [])
        self.assertEqual(self.registry.state(AbilityKind.PROJECTILE).last_used_at_ms, 2500)
        self.assertIsNone(self.registry.state(AbilityKind.DASH).last_used_at_ms)


class SpeedBoostTests(MachineTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.body = AIOrb(100.0, 100.0)
        self.opponent = Orb(700.0, 500.0)

    def test_triggers_when_far_and_doubles_speed(self) -> None:
        self.tick(0)
        self.assertTrue(self.fsm.state.speed_boosted)
        self.assertEqual(self.fsm.state.speed_boost_remaining_ms, 3000)
        self.assertEqual(len(self.fired(AbilityKind.SPEED_BOOST)), 1)

        self.tick(16, (1.0, 0.5, 0.0, 0.0))
        self.assertAlmostEqual(self.body.vx, 2.25)

    def test_not_triggered_when_close(self) -> None:
        self.opponent.x, self.opponent.y = 250.0, 100.0
        self.tick(0)
        self.assertFalse(self.fsm.state.speed_boosted)

    def test_expires_after_duration(self) -> None:
        self.tick(0)
        self.tick(2000, elapsed_ms=2000)
        self.assertTrue(self.fsm.state.speed_boosted)
        self.tick(3000, elapsed_ms=1000)
        self.assertFalse(self.fsm.state.speed_boosted)
        self.assertEqual(self.fsm.state.speed_boost_remaining_ms, 0.0)

    def test_boost_survives_dash(self) -> None:
        self.tick(0)
        self.tick(16, (1.0, 0.5, 0.0, 0.9), elapsed_ms=16)
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertTrue(self.fsm.state.speed_boosted)

    def test_boost_can_start_during_windup(self) -> None:
        self.opponent.x, self.opponent.y = 250.0, 100.0
        self.tick(0, (1.0, 0.5, 0.0, 0.9))
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertFalse(self.fsm.state.speed_boosted)

        self.opponent.x, self.opponent.y = 700.0, 500.0
        self.tick(16)
        self.assertIs(self.fsm.mode, BehaviorMode.DASH_WINDUP)
        self.assertTrue(self.fsm.state.speed_boosted)


class ResetAndHelpersTests(MachineTestCase):
    def test_reset_returns_to_normal(self) -> None:
        self.registry.mark_used(AbilityKind.PROJECTILE, 0)
        self.tick(0)
        self.assertTrue(self.fsm.is_busy)
        self.fsm.reset()
        self.assertIs(self.fsm.mode, BehaviorMode.NORMAL)
        self.assertIsNone(self.fsm.state.phase)
        self.assertFalse(self.fsm.state.speed_boosted)

    def test_enter_rejects_mismatched_phase(self) -> None:
        with self.assertRaises(TypeError):
            self.fsm._enter(BehaviorMode.DASHING, None)

    def test_normalize(self) -> None:
        self.assertIsNone(normalize(0.0, 0.0))
        self.assertEqual(normalize(3.0, 4.0), (0.6, 0.8))


if __name__ == "__main__":
    unittest.main()
