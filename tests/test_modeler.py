# Imports:

import math
import unittest

from inkmodeler.errors import OrderError
from inkmodeler.errors import ParamError
from inkmodeler.errors import SequenceError
from inkmodeler.helpers import distance
from inkmodeler.modeler import StrokeModeler
from inkmodeler.params import ModelerParams
from inkmodeler.params import PredictorKind

from .fixtures import down
from .fixtures import move
from .fixtures import suggested_params
from .fixtures import up


# Test data:

#: A short horizontal stroke, fast enough that no wobble smoothing
#: applies with the suggested params
SCENARIO = [
    down(0.0, 0.0, 0.0, pressure=0.5),
    move(1.0, 0.0, 0.01),
    move(2.0, 0.0, 0.02),
    up(3.0, 0.0, 0.03),
]


def wavy_stroke(t0=0.0, count=40, interval=0.007):
    """A longer stroke with pressure, tilt and orientation"""
    events = []
    for i in range(count):
        t = t0 + i * interval
        x = 50.0 * t
        y = 2.0 * math.sin(20.0 * t)
        stylus = dict(
            pressure=0.5 + 0.4 * math.sin(5.0 * t),
            tilt=0.3,
            orientation=(1.0 + t) % (2 * math.pi),
        )
        if i == 0:
            events.append(down(x, y, t, **stylus))
        elif i == count - 1:
            events.append(up(x, y, t, **stylus))
        else:
            events.append(move(x, y, t, **stylus))
    return events


def run(modeler, events):
    results = []
    for event in events:
        results.extend(modeler.update(event))
    return results


# Test cases:

class Scenario (unittest.TestCase):
    """A complete short stroke with the suggested params"""

    def setUp(self):
        self.modeler = StrokeModeler()
        self.outputs = [self.modeler.update(e) for e in SCENARIO]

    def test_first_result_is_the_raw_down(self):
        first, = self.outputs[0]
        self.assertEqual(first.position, (0.0, 0.0))
        self.assertEqual(first.velocity, (0.0, 0.0))
        self.assertEqual(first.acceleration, (0.0, 0.0))
        self.assertEqual(first.time, 0.0)
        self.assertEqual(first.pressure, 0.5)

    def test_moves_are_upsampled(self):
        move_results = self.outputs[1]
        self.assertEqual(len(move_results), 2)
        self.assertAlmostEqual(move_results[0].time, 0.005)
        self.assertEqual(move_results[-1].time, 0.01)

    def test_model_lags_the_input(self):
        for results, event in zip(self.outputs[1:3], SCENARIO[1:3]):
            self.assertLess(results[-1].position[0], event.x)
            self.assertGreater(results[-1].velocity[0], 0.0)

    def test_catch_up_converges(self):
        up_results = self.outputs[3]
        tail = [r for r in up_results if r.time > 0.03]
        self.assertTrue(tail)
        anchor = SCENARIO[-1].position
        dists = [distance(r.position, anchor) for r in tail]
        for d0, d1 in zip(dists, dists[1:]):
            self.assertLessEqual(d1, d0)
        self.assertLess(dists[-1], dists[0])
        self.assertLessEqual(
            len(tail),
            ModelerParams.suggested().sampling_end_of_stroke_max_iterations,
        )

    def test_unreported_pressure_is_dropped(self):
        for results in self.outputs[1:]:
            for r in results:
                self.assertIsNone(r.pressure)
                self.assertIsNone(r.tilt)

    def test_stroke_ends_idle(self):
        self.assertEqual(self.modeler.state, "idle")
        self.assertEqual(self.modeler.predict(), [])


class StreamProperties (unittest.TestCase):

    def test_times_increase_across_strokes(self):
        modeler = StrokeModeler()
        results = run(modeler, wavy_stroke())
        results += run(modeler, wavy_stroke(t0=1.0))
        for a, b in zip(results, results[1:]):
            self.assertLess(a.time, b.time)

    def test_next_stroke_must_follow_the_catch_up_tail(self):
        modeler = StrokeModeler()
        results = run(modeler, SCENARIO)
        tail_end = results[-1].time
        self.assertGreater(tail_end, SCENARIO[-1].time)
        with self.assertRaises(OrderError):
            modeler.update(down(5.0, 0.0, tail_end))
        self.assertEqual(modeler.state, "idle")
        results += run(modeler, wavy_stroke(t0=tail_end + 0.001))
        for a, b in zip(results, results[1:]):
            self.assertLess(a.time, b.time)

    def test_output_cap_covers_the_catch_up_tail(self):
        capped = StrokeModeler(suggested_params(
            sampling_max_outputs_per_call=4,
        ))
        reference = StrokeModeler(suggested_params(
            sampling_max_outputs_per_call=100,
        ))
        last = up(3.0, 0.0, 3.5 / 180)
        for modeler in (capped, reference):
            modeler.update(down(0.0, 0.0, 0.0))
        full = reference.update(last)
        resampled = [r for r in full if r.time <= last.time]
        tail = [r for r in full if r.time > last.time]
        self.assertEqual(len(resampled), 4)
        with self.assertLogs("inkmodeler.modeler", "WARNING"):
            results = capped.update(last)
        kept_tail = tail[-4:]
        self.assertEqual(results, resampled[:4 - len(kept_tail)] + kept_tail)
        self.assertEqual(results[-1], full[-1])

    def test_huge_gap_stays_within_the_output_cap(self):
        modeler = StrokeModeler()
        modeler.update(down(0.0, 0.0, 0.0))
        results = modeler.update(up(100.0, 0.0, 1.0))
        self.assertLessEqual(len(results),
                             modeler.params.sampling_max_outputs_per_call)
        self.assertGreater(results[-1].time, 1.0)

    def test_resampling_density(self):
        modeler = StrokeModeler()
        interval = modeler.params.target_interval
        events = wavy_stroke(interval=0.031)
        results = run(modeler, events[:-1])
        for a, b in zip(results, results[1:]):
            self.assertLess(b.time - a.time, interval)

    def test_stylus_state_is_interpolated(self):
        modeler = StrokeModeler()
        for r in run(modeler, wavy_stroke()):
            self.assertGreaterEqual(r.pressure, 0.1 - 1e-9)
            self.assertLessEqual(r.pressure, 0.9 + 1e-9)
            self.assertAlmostEqual(r.tilt, 0.3)
            self.assertGreaterEqual(r.orientation, 0.0)
            self.assertLess(r.orientation, 2 * math.pi)

    def test_empty_tail_still_ends_with_a_sample(self):
        modeler = StrokeModeler()
        modeler.update(down(1.0, 1.0, 0.0))
        results = modeler.update(up(1.0, 1.0, 0.001))
        self.assertEqual(len(results), 2)
        self.assertEqual(results[-1].position, (1.0, 1.0))
        self.assertAlmostEqual(results[-1].time,
                               0.001 + modeler.params.target_interval)


class Prediction (unittest.TestCase):

    def test_idle_predicts_nothing(self):
        self.assertEqual(StrokeModeler().predict(), [])

    def test_single_input_predicts_nothing(self):
        modeler = StrokeModeler()
        modeler.update(down(4.0, 5.0, 2.0, pressure=1.0))
        self.assertEqual(modeler.predict(), [])

    def test_prediction_catches_up(self):
        modeler = StrokeModeler()
        run(modeler, wavy_stroke()[:10])
        predicted = modeler.predict()
        self.assertTrue(predicted)
        self.assertTrue(all(p.time > 9 * 0.007 for p in predicted))

    def test_predict_is_idempotent(self):
        modeler = StrokeModeler()
        reference = StrokeModeler()
        events = wavy_stroke()
        for event in events[:-1]:
            expected = reference.update(event)
            self.assertEqual(modeler.update(event), expected)
            first = modeler.predict()
            self.assertEqual(modeler.predict(), first)
        self.assertEqual(modeler.update(events[-1]),
                         reference.update(events[-1]))

    def test_kalman_predictor(self):
        params = suggested_params(predictor=PredictorKind.KALMAN)
        modeler = StrokeModeler(params)
        events = wavy_stroke()
        modeler.update(events[0])
        self.assertEqual(modeler.predict(), [])
        for event in events[1:20]:
            modeler.update(event)
        predicted = modeler.predict()
        self.assertTrue(predicted)
        self.assertEqual(modeler.predict(), predicted)
        for a, b in zip(predicted, predicted[1:]):
            self.assertLess(a.time, b.time)
        results = run(modeler, events[20:])
        self.assertEqual(modeler.state, "idle")
        self.assertGreater(results[-1].time, events[-1].time)


class Errors (unittest.TestCase):

    def test_sequence_errors(self):
        modeler = StrokeModeler()
        self.assertRaises(SequenceError, modeler.update, move(0, 0, 0))
        self.assertRaises(SequenceError, modeler.update, up(0, 0, 0))
        modeler.update(down(0, 0, 0))
        self.assertRaises(SequenceError, modeler.update, down(1, 1, 1))

    def test_failed_update_changes_nothing(self):
        modeler = StrokeModeler()
        reference = StrokeModeler()
        events = wavy_stroke()
        run(modeler, events[:5])
        run(reference, events[:5])
        bad = [
            move(0.0, 0.0, events[4].time),
            move(0.0, 0.0, events[3].time),
            move(float("nan"), 0.0, events[5].time),
            down(0.0, 0.0, events[5].time),
        ]
        for event in bad:
            with self.assertRaises((OrderError, SequenceError)):
                modeler.update(event)
        self.assertEqual(modeler.predict(), reference.predict())
        self.assertEqual(run(modeler, events[5:]), run(reference, events[5:]))

    def test_restart_on_down(self):
        modeler = StrokeModeler(suggested_params(restart_on_down=True))
        run(modeler, wavy_stroke()[:5])
        results = modeler.update(down(10.0, 10.0, 0.5, pressure=0.2))
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].position, (10.0, 10.0))
        self.assertEqual(results[0].pressure, 0.2)
        self.assertEqual(modeler.state, "active")

    def test_bad_params(self):
        bad = suggested_params(sampling_min_output_rate=0.0)
        self.assertRaises(ParamError, StrokeModeler, bad)
        self.assertRaises(ParamError, StrokeModeler, {"not": "params"})

    def test_bad_reset_params_keep_old(self):
        params = suggested_params(sampling_min_output_rate=120.0)
        modeler = StrokeModeler(params)
        modeler.update(down(0, 0, 0))
        with self.assertRaises(ParamError):
            modeler.reset_with_params(suggested_params(
                position_modeler_drag_constant=-1.0,
            ))
        self.assertIs(modeler.params, params)
        self.assertEqual(modeler.state, "active")


class Reset (unittest.TestCase):

    def test_reset_mid_stroke(self):
        modeler = StrokeModeler()
        run(modeler, wavy_stroke()[:10])
        modeler.reset()
        self.assertEqual(modeler.state, "idle")
        self.assertEqual(modeler.predict(), [])
        self.assertEqual(run(modeler, wavy_stroke()),
                         run(StrokeModeler(), wavy_stroke()))

    def test_reset_after_stroke(self):
        modeler = StrokeModeler()
        first = run(modeler, SCENARIO)
        modeler.reset()
        self.assertEqual(run(modeler, SCENARIO), first)

    def test_reset_with_params(self):
        modeler = StrokeModeler()
        run(modeler, wavy_stroke()[:10])
        params = suggested_params(sampling_min_output_rate=60.0)
        modeler.reset_with_params(params)
        self.assertIs(modeler.params, params)
        self.assertEqual(modeler.state, "idle")
        self.assertEqual(run(modeler, SCENARIO),
                         run(StrokeModeler(params), SCENARIO))

    def test_reset_with_default_params(self):
        modeler = StrokeModeler(suggested_params(restart_on_down=True))
        modeler.reset_with_params(None)
        self.assertEqual(modeler.params, ModelerParams.suggested())


if __name__ == '__main__':
    unittest.main()
