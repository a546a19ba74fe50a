from xornet import TrainingConfig, TrainingSession
from xornet.data import CLEAN_XOR


def test_clean_xor_reaches_full_accuracy():
    config = TrainingConfig(
        topology=(2, 4, 1), learning_rate=0.5, confidence_penalty=0.0, reset_seed=123
    )
    session = TrainingSession(config, dataset=CLEAN_XOR)
    initial_loss = session.current.loss

    reached = None
    for _ in range(300):
        snapshot = session.advance()
        if reached is None and snapshot.accuracy == 1.0:
            reached = snapshot.step

    assert reached is not None, "seed 123 should separate XOR within 300 epochs"
    assert session.current.loss < initial_loss
    assert session.current.accuracy == 1.0
    assert len(session.history) == 301


def test_noisy_training_reduces_loss():
    session = TrainingSession(
        TrainingConfig(num_samples=60, noise_level=0.1, data_seed=42, learning_rate=0.1)
    )
    start = session.current.loss
    session.advance_epochs(30)
    assert session.current.loss < start
