import asyncio

from trendfeed.tagging import TagNormalizer, slugify, tag_slug


def test_slugify_examples():
    assert slugify("React / Next.js!") == "react-next-js"
    assert slugify("TypeScript") == "typescript"
    assert slugify("  --C++--  ") == "c"
    assert slugify("snake_case-ok") == "snake_case-ok"


def test_slugify_non_ascii_is_empty():
    assert slugify("機械学習") == ""


def test_tag_slug_falls_back_to_stable_hash():
    slug = tag_slug("機械学習")
    assert slug.startswith("tag-")
    assert len(slug) == len("tag-") + 10
    assert tag_slug("機械学習") == slug
    assert tag_slug("生成AI") == "ai"
    assert tag_slug("個人開発") != slug


def test_prepare_dedups_by_slug_and_drops_blanks():
    normalizer = TagNormalizer(store=None)
    tags = normalizer.prepare(["Python", "python", " ", "", "Next.js", "next-js"])
    assert [t.slug for t in tags] == ["python", "next-js"]
    assert tags[0].name == "Python"


def test_resolve_reuses_existing_tags(store):
    normalizer = TagNormalizer(store)

    first = asyncio.run(normalizer.resolve(["Rust", "Go"]))
    second = asyncio.run(normalizer.resolve(["rust", "GO", "Zig"]))

    assert second[:2] == first
    assert len(store.tags) == 3


def test_attach_links_each_tag_once(store):
    normalizer = TagNormalizer(store)

    linked = asyncio.run(normalizer.attach(7, ["AWS", "aws", "Lambda"]))
    asyncio.run(normalizer.attach(7, ["AWS"]))

    assert linked == 2
    assert len(store.article_tags) == 2


def test_attach_skips_failing_tags(store):
    async def flaky_upsert(tag):
        if tag.slug == "bad":
            raise RuntimeError("constraint violation")
        return 1

    store.upsert_tag_by_slug = flaky_upsert
    linked = asyncio.run(TagNormalizer(store).attach(1, ["bad", "good"]))

    assert linked == 1
    assert store.article_tags == {(1, 1)}
