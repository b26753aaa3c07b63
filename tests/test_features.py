import pytest

from duo import features


def test_builtin_features_are_enabled_by_default():
    for name in ("aio", "aio-fs", "aio-io", "aio-net", "aio-sync", "aio-time"):
        assert name in features.known()
        assert features.enabled(name)


@pytest.mark.parametrize("name", ["aio", "aio-fs", "my_feature", "x1"])
def test_valid_names(name):
    assert features.is_valid_name(name)


@pytest.mark.parametrize("name", ["", "Aio", "aio fs", "-aio", "aio-", "1aio", None, 3])
def test_malformed_names(name):
    assert not features.is_valid_name(name)
    with pytest.raises(ValueError):
        features.check(name)


def test_unknown_name():
    with pytest.raises(KeyError):
        features.enabled("does-not-exist")


def test_disabling_master_disables_dependents():
    with features.override({"aio": False}):
        assert not features.enabled("aio")
        assert not features.enabled("aio-fs")
        assert not features.enabled("aio-time")
    assert features.enabled("aio-fs")


def test_override_restores_on_error():
    with pytest.raises(RuntimeError):
        with features.override({"aio-net": False}):
            raise RuntimeError("boom")
    assert features.enabled("aio-net")


def test_register_custom_feature():
    features.register("test-gated", requires="aio-fs")
    assert features.enabled("test-gated")
    with features.override({"aio-fs": False}):
        assert not features.enabled("test-gated")
    features.register("test-gated", enabled=False)
    assert not features.enabled("test-gated")


def test_register_requires_known_feature():
    with pytest.raises(KeyError):
        features.register("orphan", requires="unknown-parent")


def test_environment_variable_disables_features(monkeypatch):
    monkeypatch.setenv(features.ENV_DISABLE, "aio-net, aio-time")
    try:
        features._init()
        assert not features.enabled("aio-net")
        assert not features.enabled("aio-time")
        assert features.enabled("aio-fs")
    finally:
        monkeypatch.delenv(features.ENV_DISABLE)
        features._init()
    assert features.enabled("aio-net")


def test_environment_variable_rejects_unknown_features(monkeypatch):
    monkeypatch.setenv(features.ENV_DISABLE, "aio-nope")
    try:
        with pytest.raises(KeyError):
            features._init()
    finally:
        monkeypatch.delenv(features.ENV_DISABLE)
        features._init()
