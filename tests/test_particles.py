"""Tests for the particle arena."""

import math
from dataclasses import dataclass

import pytest

from soundcanvas.core.features import BandEnergy
from soundcanvas.core.geometry import Bounds, clamp_index, link_strength, unit_vector
from soundcanvas.core.particles import ForceModel, Particle, ParticleSystem


@dataclass
class ConstantForce(ForceModel):
    ax: float = 0.0
    ay: float = 0.0

    def accelerate(self, particle, index, rng):
        return (self.ax, self.ay)


class TestReinitialize:
    def test_count(self, particles):
        assert len(particles) == 150
        assert [p.id for p in particles] == list(range(150))

    def test_spawned_within_80_percent(self, colors, rng):
        for width, height in [(800, 600), (1920, 1080), (50, 400)]:
            bounds = Bounds(width, height)
            system = ParticleSystem(colors, bounds, rng=rng)
            system.reinitialize(150, bounds)

            assert len(system) == 150
            cx, cy = bounds.center
            for p in system:
                assert abs(p.x - cx) <= 0.4 * width
                assert abs(p.y - cy) <= 0.4 * height

    def test_attribute_ranges(self, particles):
        for p in particles:
            assert 1.0 <= p.size <= 4.0
            assert 100.0 <= p.initial_life <= 250.0
            assert p.life == p.initial_life
            assert 50.0 <= p.orbit_radius <= 150.0
            assert (p.ox, p.oy) == (p.x, p.y)

    def test_replaces_any_prior_count(self, particles):
        particles.reinitialize(10)
        assert len(particles) == 10
        particles.reinitialize(150)
        assert len(particles) == 150

    def test_negative_count_rejected(self, particles):
        with pytest.raises(ValueError):
            particles.reinitialize(-1)


class TestStep:
    def test_life_invariant(self, particles, rng):
        force = ConstantForce(energy=BandEnergy(overall=255.0), decay=1.0, decay_gain=3.0)
        for _ in range(400):
            particles.step(force)
            for p in particles:
                assert 0.0 <= p.life <= p.initial_life

    def test_arena_size_constant(self, particles):
        force = ConstantForce(ax=0.5, ay=-0.5, max_speed=10.0)
        for _ in range(300):
            particles.step(force)
        assert len(particles) == 150

    def test_baseline_decay_when_silent(self, particles):
        particles.respawn_chance = 0.0
        p = particles[0]
        p.x, p.y = particles.bounds.center
        p.vx = p.vy = 0.0
        before = p.life

        particles.step(ConstantForce(decay=0.5))
        assert p.life == pytest.approx(before - 0.5)

    def test_decay_scales_with_volume(self):
        quiet = ForceModel(decay=0.5, decay_gain=1.0)
        loud = ForceModel(decay=0.5, decay_gain=1.0, energy=BandEnergy(overall=255.0))
        assert quiet.decay_rate() == 0.5
        assert loud.decay_rate() == pytest.approx(1.0)

    def test_speed_clamped(self, particles):
        particles.respawn_chance = 0.0
        particles.step(ConstantForce(ax=50.0, max_speed=2.0))
        for p in particles:
            assert math.hypot(p.vx, p.vy) <= 2.0 + 1e-9

    def test_escaped_particle_respawns(self, particles):
        particles.respawn_chance = 0.0
        p = particles[5]
        p.x = -500.0
        before = particles.respawned

        particles.step(ConstantForce())
        assert particles.respawned > before
        assert particles.bounds.contains(p.x, p.y, margin=p.size)
        assert p.life == p.initial_life

    def test_dead_particle_respawns_in_place(self, particles):
        particles.respawn_chance = 0.0
        p = particles[3]
        p.life = 0.1
        particles.step(ConstantForce(decay=0.5))

        assert particles[3] is p
        assert p.life > 0

    def test_burst_respawn_near_center(self, particles):
        p = particles[0]
        particles.respawn(p, "burst")
        cx, cy = particles.bounds.center
        assert 20.0 <= math.hypot(p.x - cx, p.y - cy) <= 60.0

    def test_non_finite_acceleration_ignored(self, particles):
        particles.respawn_chance = 0.0
        particles.step(ConstantForce(ax=float("nan"), ay=float("inf")))
        for p in particles:
            assert math.isfinite(p.x) and math.isfinite(p.y)


class TestForceModelValidation:
    @pytest.mark.parametrize("damping", [0.9, 0.99, 1.0])
    def test_damping_range(self, damping):
        with pytest.raises(ValueError, match="Damping"):
            ForceModel(damping=damping)

    @pytest.mark.parametrize("decay", [0.05, 1.5])
    def test_decay_range(self, decay):
        with pytest.raises(ValueError, match="decay"):
            ForceModel(decay=decay)

    def test_unknown_respawn(self):
        with pytest.raises(ValueError):
            ForceModel(respawn="teleport")


class TestGeometry:
    def test_zero_vector_has_no_direction(self):
        assert unit_vector(0.0, 0.0)[:2] == (0.0, 0.0)

    def test_unit_vector(self):
        ux, uy, length = unit_vector(3.0, 4.0)
        assert (ux, uy, length) == pytest.approx((0.6, 0.8, 5.0))

    def test_link_strength_symmetric(self):
        assert link_strength(0, 0, 30, 40, 100) == link_strength(30, 40, 0, 0, 100) == pytest.approx(0.5)
        assert link_strength(0, 0, 300, 0, 100) == 0.0

    @pytest.mark.parametrize("index,expected", [(-3, 0), (5.7, 5), (99, 9), (float("nan"), 0)])
    def test_clamp_index(self, index, expected):
        assert clamp_index(index, 10) == expected

    def test_bounds_must_be_positive(self):
        with pytest.raises(ValueError):
            Bounds(0, 100)

    def test_particle_life_ratio(self):
        p = Particle(0, 0, 0, 0, 0, 0, 0, 1, "#fff", 50.0, 100.0, 0.0, 60.0)
        assert p.life_ratio == 0.5
