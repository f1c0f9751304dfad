import asyncio

import pytest

from gobi_scorers import SCORER_REGISTRY
from gobi_scorers.register import (
    classify_endings,
    count_with_precedence,
    measure,
    measure_async,
    segment_sentences,
)
from gobi_scorers.rules import RANKA_RULES, RegisterWeights


def test_empty_response_gets_only_clean_bonus():
    r = measure("テスト", "")
    assert r.score == 0.1
    assert r.total_sentences == 0
    assert r.appropriate_endings == 0
    assert r.inappropriate_count == 0


def test_whitespace_only_has_no_sentences():
    assert segment_sentences("   \n ") == []
    assert measure("", "  ").score == 0.1


def test_no_terminal_punctuation_is_one_sentence():
    r = measure("テスト", "はいそうですわね")
    assert r.total_sentences == 1
    assert r.appropriate_endings == 1
    assert r.details.ending_patterns == {"わね": 1}


def test_segmenter_trims_and_drops_empty_fragments():
    assert segment_sentences(" あら。。 そうですの！ 本当？ ") == ["あら", "そうですの", "本当"]


def test_three_desuwa_sentences_score_half():
    r = measure("テスト", "こちらですわ。あちらですわ。そちらですわ。")
    assert r.total_sentences == 3
    assert r.appropriate_endings == 3
    assert r.details.ending_patterns == {"ですわ": 3}
    assert r.characteristic_phrase_count == 0
    assert r.pronoun_usage.first_person == 0
    assert r.pronoun_usage.second_person == 0
    assert r.score == 0.5


def test_ending_counts_by_canonical_form():
    out = "こちらは月読堂ですわ。本日も営業しておりますわ。何かございましたら、お申し付けくださいましょう。"
    r = measure("テスト", out)
    assert r.total_sentences == 3
    assert r.appropriate_endings == 3
    assert r.details.ending_patterns == {"ですわ": 1, "ますわ": 1, "ましょう": 1}


def test_desuwane_is_counted_once_under_wane():
    r = measure("テスト", "そうですわね。本当にそうですわね。")
    assert r.total_sentences == 2
    assert r.appropriate_endings == 2
    assert r.details.ending_patterns == {"わね": 2}
    assert "ですわ" not in r.details.ending_patterns


def test_unmatched_sentences_only_count_toward_total():
    r = measure("テスト", "こんにちは。良い天気ですわ。")
    assert r.total_sentences == 2
    assert r.appropriate_endings == 1
    assert r.score == 0.3


def test_combined_first_person_counts_once():
    r = measure("テスト", "私（わたくし）、朧月蘭華と申しますわ。")
    assert r.pronoun_usage.first_person == 1


def test_combined_first_person_ascii_parens():
    assert count_with_precedence("私(わたくし)です", RANKA_RULES.first_person) == 1


def test_combined_first_person_mixed_brackets():
    assert count_with_precedence("私（わたくし)と私(わたくし）", RANKA_RULES.first_person) == 2


def test_midpoint_rounds_half_up():
    # 1 of 16 sentences matches: 0.4 / 16 + 0.1 == 0.125
    assert measure("", "こちらですわ。" + "こんにちは。" * 15).score == 0.13


def test_ending_must_be_at_very_end():
    count, hist = classify_endings(["そうですわ\n"], RANKA_RULES.endings)
    assert count == 0
    assert hist == {}


def test_reports_compare_by_value_but_are_unhashable():
    r = measure("テスト", "そうですわね。")
    assert r == measure("テスト", "そうですわね。")
    with pytest.raises(TypeError):
        hash(r)
    with pytest.raises(TypeError):
        hash(r.details)


def test_combined_form_plus_standalone_forms():
    text = "私（わたくし）が申しますと、わたくしも私も同じですわ。"
    assert count_with_precedence(text, RANKA_RULES.first_person) == 3


def test_other_brackets_are_not_combined():
    # 【】 is not a recognised combined form: 私 and わたくし count separately.
    assert count_with_precedence("私【わたくし】", RANKA_RULES.first_person) == 2


def test_pronouns_first_and_second_person():
    out = "わたくし、朧月蘭華と申しますわ。あなた様のことも、ぜひお聞かせくださいませ。私とあなたの出会いも、きっと何かの縁ですわね。"
    r = measure("あなたのことを教えてください", out)
    assert r.pronoun_usage.first_person == 2
    assert r.pronoun_usage.second_person == 2


def test_anata_sama_alone_counts_once():
    r = measure("テスト", "あなた様にお見せしたい本がございます。")
    assert r.pronoun_usage.second_person == 1


def test_okyakusama_counts_independently():
    assert count_with_precedence("お客様とあなた様とあなた", RANKA_RULES.second_person) == 3


def test_slang_counts_every_match_and_dedupes_surfaces():
    out = "本当にヤバい本がマジでいっぱいあるんすよ！最近入荷したやつとか、めっちゃエモいっすから。あ、でも古い本も結構イケてるんで、お客さんの趣味によってはそっちもアリっすね。"
    r = measure("おすすめの本を教えてください", out)
    assert r.inappropriate_count == 4
    assert r.details.inappropriate_phrases_found == ("ヤバい", "マジ", "っす")
    assert r.score < 0.3


def test_worst_case_scores_low():
    r = measure("テスト", "マジやばいっす！ウケるんですけどwww")
    assert r.inappropriate_count >= 3
    assert r.appropriate_endings == 0
    assert r.characteristic_phrase_count == 0
    assert r.score < 0.2


def test_single_slang_match_removes_clean_bonus():
    clean = measure("テスト", "こちらですわ。")
    dirty = measure("テスト", "こちらですわ。草")
    assert clean.score == 0.5
    assert dirty.inappropriate_count == 1
    # 1 of 2 sentences matches an ending, no clean bonus.
    assert dirty.score == 0.2


def test_mixed_endings_and_slang():
    out = "こんにちはですわ。マジで素敵な本がございますわね。ヤバい話ですが、こちらは200年前の貴重な書物ですこと。"
    r = measure("テスト", out)
    assert r.appropriate_endings == 3
    assert 0.3 < r.score < 0.5
    assert "マジ" in r.details.inappropriate_phrases_found
    assert "ヤバい" in r.details.inappropriate_phrases_found


def test_characteristic_phrases_counted_once_each():
    r = measure("テスト", "ふふっ。ふふっ。ふふっ。")
    assert r.characteristic_phrase_count == 1
    assert r.details.characteristic_phrases_used == ("ふふっ",)


def test_phrase_component_saturates_at_five():
    five = "あら、まぁ。ふふっ。これはこれは。面白きことを仰る。瓦版"
    six = five + "。御贔屓"
    r5 = measure("テスト", five)
    r6 = measure("テスト", six)
    assert r5.characteristic_phrase_count == 5
    assert r6.characteristic_phrase_count == 6
    # No endings, no pronouns: 0.3 phrases + 0.1 clean either way.
    assert r5.score == 0.4
    assert r6.score == 0.4


def test_many_characteristic_phrases_score_high():
    out = "ふふっ、面白きことを仰る。確かに、あの便利な道具は千里眼のようなものですわね。私も200年の歳月を生きてきましたが、この数十年の人間界の変化には本当に驚かされますわ。これはこれは、人間の知恵というものは実に素晴らしいですこと。"
    r = measure("最近のスマートフォンってすごいですね", out)
    assert r.score > 0.5
    for phrase in ("ふふっ", "面白きことを仰る", "便利な道具", "千里眼のような", "これはこれは"):
        assert phrase in r.details.characteristic_phrases_used


def test_long_response_counts_all_sentences():
    out = (
        "これはこれは、お客様ですわね。本日は良い天気でございます。私、朧月蘭華と申しますわ。"
        "月読堂へようこそいらっしゃいましたこと。こちらには様々な本がございますわ。"
        "古いものから新しいものまで、幅広く取り揃えておりますこと。あなた様のお探しの本も、きっと見つかるでしょう。"
        "ふふっ、面白きことを仰る。私も200年以上生きておりますが、人間の知恵には驚かされますわね。"
        "何かございましたら、遠慮なくお申し付けくださいませ。お茶でもいかがでしょうか。"
    )
    r = measure("テスト", out)
    assert r.total_sentences == 11
    assert r.appropriate_endings == 7
    assert r.score > 0.5


def test_near_perfect_response():
    out = "あら、まぁ。私（わたくし）、朧月蘭華と申しますわ。あなた様とこうしてお会いできて光栄ですこと。ふふっ、面白きことを仰る。これはこれは、素敵なお客様ですわね。"
    r = measure("テスト", out)
    assert r.score == 0.78
    assert r.score <= 1.0


def test_maximum_score_is_one():
    out = "あら、まぁ、ふふっ、これはこれは、面白きことを仰る、瓦版ですわ。私（わたくし）はあなた様を存じておりますわ。"
    r = measure("テスト", out)
    assert r.score == 1.0


def test_prompt_is_not_read():
    out = "こちらですわ。"
    assert measure("マジwww", out) == measure("", out)


def test_none_is_treated_as_empty():
    assert measure(None, None).score == 0.1


def test_measure_is_idempotent():
    out = "私（わたくし）、あなた様をお待ちしておりましたわ。マジで。"
    assert measure("x", out) == measure("x", out)
    assert measure("x", out).to_dict() == measure("x", out).to_dict()


def test_to_dict_is_plain():
    d = measure("テスト", "ふふっ。ヤバい").to_dict()
    assert d["pronoun_usage"] == {"first_person": 0, "second_person": 0}
    assert d["details"]["characteristic_phrases_used"] == ["ふふっ"]
    assert d["details"]["inappropriate_phrases_found"] == ["ヤバい"]


@pytest.mark.parametrize(
    "text",
    ["", "。！？", "www" * 50, "ですわ。" * 40, "あなた様あなたお客様私（わたくし）わたくし私"],
)
def test_score_in_unit_interval(text):
    assert 0.0 <= measure("", text).score <= 1.0


def test_custom_weights_change_the_profile():
    weights = RegisterWeights(endings=0.9, phrases=0.0, first_person=0.0, second_person=0.0, clean=0.1)
    r = measure("テスト", "こちらですわ。", weights=weights)
    assert r.score == 1.0


def test_measure_async_matches_sync():
    out = "あら、まぁ。そうですわね。"
    assert asyncio.run(measure_async("テスト", out)) == measure("テスト", out)


def test_registry_entry_returns_score():
    f = SCORER_REGISTRY["gobi_register"]
    assert f("テスト", "こちらですわ。あちらですわ。そちらですわ。") == 0.5
