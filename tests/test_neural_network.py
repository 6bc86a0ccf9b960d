import unittest

import numpy as np

from ai.neural_network import DimensionError, NetworkConfig, NeuralNetwork, sigmoid


def make_net(seed: int = 7) -> NeuralNetwork:
    return NeuralNetwork(rng=np.random.default_rng(seed))


class NeuralNetworkShapeTests(unittest.TestCase):
    def test_default_shape(self) -> None:
        net = make_net()
        self.assertEqual(net.shape, (8, 16, 4))
        self.assertEqual(net.weights_ih.shape, (16, 8))
        self.assertEqual(net.weights_ho.shape, (4, 16))
        self.assertEqual(net.bias_h.shape, (16,))
        self.assertEqual(net.bias_o.shape, (4,))

    def test_initial_weights_are_small_and_momentum_buffers_zero(self) -> None:
        net = make_net()
        for arr in (net.weights_ih, net.weights_ho, net.bias_h, net.bias_o):
            self.assertTrue(np.all(arr >= -0.25))
            self.assertTrue(np.all(arr < 0.25))
        self.assertFalse(np.any(net.prev_delta_ih))
        self.assertFalse(np.any(net.prev_delta_ho))

    def test_shape_is_unchanged_by_training(self) -> None:
        net = make_net()
        for _ in range(20):
            net.train([0.3] * 8, [0.9, 0.1, 0.9, 0.1])
        self.assertEqual(net.weights_ih.shape, (16, 8))
        self.assertEqual(net.weights_ho.shape, (4, 16))


class PredictTests(unittest.TestCase):
    def test_outputs_are_in_open_unit_interval(self) -> None:
        net = make_net()
        for inputs in ([0.0] * 8, [1.0] * 8, [0.5, 0.2, -0.3, 0.4, 0.9, 0.1, 1.0, 0.0],
                       [1e6] * 8, [-1e6] * 8):
            out = net.predict(inputs)
            self.assertEqual(out.shape, (4,))
            self.assertTrue(np.all(out > 0.0), inputs)
            self.assertTrue(np.all(out < 1.0), inputs)

    def test_predict_does_not_mutate_network(self) -> None:
        net = make_net()
        before = net.get_state()
        net.predict([0.1] * 8)
        net.predict([0.9] * 8)
        self.assertEqual(before, net.get_state())

    def test_predict_matches_manual_forward_pass(self) -> None:
        net = make_net()
        x = np.linspace(0.0, 1.0, 8)
        hidden = sigmoid(net.weights_ih @ x + net.bias_h)
        expected = sigmoid(net.weights_ho @ hidden + net.bias_o)
        np.testing.assert_allclose(net.predict(x), expected)

    def test_wrong_input_length_raises(self) -> None:
        net = make_net()
        with self.assertRaises(DimensionError):
            net.predict([0.0] * 7)
        with self.assertRaises(DimensionError):
            net.predict([0.0] * 9)

    def test_dimension_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(DimensionError, ValueError))


class TrainTests(unittest.TestCase):
    def test_train_returns_mean_absolute_error_before_update(self) -> None:
        net = make_net()
        x = [0.2] * 8
        t = np.array([0.9, 0.1, 0.9, 0.1])
        expected = float(np.mean(np.abs(t - net.predict(x))))
        self.assertAlmostEqual(net.train(x, t), expected)

    def test_wrong_target_length_raises(self) -> None:
        net = make_net()
        with self.assertRaises(DimensionError):
            net.train([0.0] * 8, [0.5] * 3)
        with self.assertRaises(DimensionError):
            net.train([0.0] * 6, [0.5] * 4)

    def test_repeated_training_on_fixed_pair_does_not_diverge(self) -> None:
        net = make_net(3)
        x = [0.4, 0.6, 0.05, -0.02, 0.8, 0.2, 1.0, 0.0]
        t = [0.9, 0.1, 0.9, 0.1]
        initial = float(np.mean(np.abs(np.asarray(t) - net.predict(x))))
        for _ in range(50):
            net.train(x, t)
        final = float(np.mean(np.abs(np.asarray(t) - net.predict(x))))
        self.assertLessEqual(final, initial)

    def test_single_step_matches_reference_update(self) -> None:
        net = make_net(11)
        cfg = net.cfg
        x = np.array([0.1, 0.7, 0.3, -0.2, 0.5, 0.9, 1.0, 0.0])
        t = np.array([0.8, 0.2, 0.9, 0.1])

        w_ih, w_ho = net.weights_ih.copy(), net.weights_ho.copy()
        b_h, b_o = net.bias_h.copy(), net.bias_o.copy()

        hidden = sigmoid(w_ih @ x + b_h)
        out = sigmoid(w_ho @ hidden + b_o)
        err = t - out
        grad = err * out * (1 - out) * cfg.learning_rate
        hidden_err = w_ho.T @ err          # pre-update output weights
        hidden_grad = hidden_err * hidden * (1 - hidden) * cfg.learning_rate

        net.train(x, t)

        np.testing.assert_allclose(net.weights_ho, w_ho + np.outer(grad, hidden))
        np.testing.assert_allclose(net.bias_o, b_o + grad)
        np.testing.assert_allclose(net.weights_ih, w_ih + np.outer(hidden_grad, x))
        np.testing.assert_allclose(net.bias_h, b_h + hidden_grad)
        np.testing.assert_allclose(net.prev_delta_ho, np.outer(grad, hidden))
        np.testing.assert_allclose(net.prev_delta_ih, np.outer(hidden_grad, x))

    def test_momentum_carries_previous_delta(self) -> None:
        net = make_net(5)
        x = [0.5] * 8
        t = [0.9, 0.9, 0.1, 0.1]
        net.train(x, t)
        prev = net.prev_delta_ho.copy()

        hidden = sigmoid(net.weights_ih @ np.asarray(x) + net.bias_h)
        out = sigmoid(net.weights_ho @ hidden + net.bias_o)
        grad = (np.asarray(t) - out) * out * (1 - out) * net.cfg.learning_rate
        before = net.weights_ho.copy()

        net.train(x, t)
        expected_delta = np.outer(grad, hidden) + net.cfg.momentum * prev
        np.testing.assert_allclose(net.weights_ho - before, expected_delta)

    def test_custom_config_changes_shape(self) -> None:
        net = NeuralNetwork(NetworkConfig(input_size=3, hidden_size=5, output_size=2),
                            rng=np.random.default_rng(0))
        self.assertEqual(net.predict([0.1, 0.2, 0.3]).shape, (2,))


class StateTests(unittest.TestCase):
    def test_set_state_restores_predictions(self) -> None:
        a, b = make_net(1), make_net(2)
        a.train([0.3] * 8, [0.9, 0.1, 0.9, 0.1])
        b.set_state(a.get_state())
        np.testing.assert_allclose(a.predict([0.6] * 8), b.predict([0.6] * 8))

    def test_set_state_rejects_other_shape(self) -> None:
        small = NeuralNetwork(NetworkConfig(hidden_size=4), rng=np.random.default_rng(0))
        with self.assertRaises(DimensionError):
            make_net().set_state(small.get_state())


if __name__ == "__main__":
    unittest.main()
