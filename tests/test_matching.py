from waveplot.matching import containment_score, find_best_key, tokenize


def test_exact_match_beats_other_tiers():
    assert find_best_key("FOO_BAR", ["FOOBAR_BAZ", "FOO_BAR"]) == "FOO_BAR"


def test_exact_match_is_case_insensitive():
    assert find_best_key("foo_bar", ["FOO_BAR"]) == "FOO_BAR"


def test_containment_match():
    assert containment_score("CH1_SENSOR", "SENSOR") == len("SENSOR")
    assert find_best_key("CH1_SENSOR", ["SENSOR"]) == "SENSOR"


def test_containment_prefers_longest_shared_span():
    assert find_best_key("CH1_SENSOR_A", ["CH1", "SENSOR"]) == "SENSOR"


def test_containment_either_direction():
    assert find_best_key("SENSOR", ["CH1_SENSOR_LONG"]) == "CH1_SENSOR_LONG"


def test_containment_tie_goes_to_first_candidate():
    assert find_best_key("AB_CD", ["AB", "CD"]) == "AB"
    assert find_best_key("AB_CD", ["CD", "AB"]) == "CD"


def test_containment_can_match_prefix_of_longer_key():
    # Best-effort: a short key inside a longer one still counts.
    assert find_best_key("CH1", ["CH10_TEMP"]) == "CH10_TEMP"


def test_token_overlap_match():
    assert find_best_key("ALPHA_BETA", ["BETA_GAMMA"]) == "BETA_GAMMA"
    assert find_best_key("ALPHA_BETA", ["ZETA_OMEGA"]) is None


def test_token_overlap_picks_highest_score():
    candidates = ["GAMMA_ONE", "BETA_GAMMA_TWO"]
    assert find_best_key("ALPHA_BETA_GAMMA", candidates) == "BETA_GAMMA_TWO"


def test_token_overlap_tie_goes_to_first_candidate():
    assert find_best_key("ALPHA_BETA", ["BETA_X1", "ALPHA_Y2"]) == "BETA_X1"


def test_single_character_tokens_are_ignored():
    assert tokenize("A_B_CD") == frozenset({"cd"})
    assert find_best_key("A_B_C", ["A_X"]) is None


def test_reordered_words_recover_calibration():
    assert find_best_key("SENSOR_PRESSURE_RUN2", ["PRESSURE_SENSOR"]) == "PRESSURE_SENSOR"


def test_no_candidates_or_blank_query():
    assert find_best_key("FOO", []) is None
    assert find_best_key("", ["FOO", ""]) is None
    assert find_best_key("   ", ["FOO"]) is None
