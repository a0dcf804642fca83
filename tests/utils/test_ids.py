from dataclean.utils.ids import slugify, stable_hash, short_id, make_suggestion_id

def test_slugify_basic_and_separators():
    assert slugify("Hello World!") == "hello-world"
    assert slugify("a/b\\c  d") == "a-b-c-d"
    assert slugify("Prénom") == "prenom"
    assert slugify("***") == "col"

def test_stable_hash_deterministic_and_json_order_insensitive():
    a = {"b": 1, "a": 2}
    b = {"a": 2, "b": 1}
    assert stable_hash(a) == stable_hash(b)

def test_short_id_length_and_prefix_changes():
    sx = short_id({"x": 1}, 8)
    sy = short_id({"x": 2}, 8)
    assert len(sx) == 8
    assert len(sy) == 8
    assert sx != sy

def test_suggestion_ids_are_readable_and_stable():
    assert make_suggestion_id("impute_mean", "Montant TTC") == "impute-mean-montant-ttc"
    assert make_suggestion_id("dedupe", "email") == make_suggestion_id("dedupe", "email")
    assert make_suggestion_id("dedupe", "email") != make_suggestion_id("dedupe", "phone")
