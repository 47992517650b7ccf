# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""Customer reactions, error-screen quotes and crowd chatter."""

import random
from typing import Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


WRONG_REACTIONS: List[str] = [
    "Wah lau eh!",
    "Aiyah!",
    "Siao ah!",
    "Alamak!",
    "Haiyah!",
    "Wrong one lah!",
    "Eh, this not what I order!",
    "You blur like sotong!",
    "Aiyo, pay attention lah!",
    "Huh?! Wrong drink sia!",
    "Walao, I say already!",
    "Cannot like that lah!",
    "Simi sai is this?!",
    "You deaf ah?!",
    "I order what, you give what?!",
    "Wah piang!",
    "Die lah, wrong drink!",
    "Jialat!",
    "Terrible sia!",
    "How can like that!",
    "I want refund!",
    "Boss, this wrong leh!",
    "Aiya, never listen!",
    "You kidding me ah?!",
    "So hard to make meh?!",
    "Tsk, try again lah!",
    "Not this one leh!",
    "My grandmother can do better!",
    "Where got like that one!",
    "Bodoh!",
    "Macam wrong order only!",
    "Eh hello, I say Kopi leh!",
    "This one taste wrong lah!",
    "You new here ah?",
    "Steady lah, wrong drink again!",
    "Cannot make it sia!",
    "Go back to school lah!",
    "Wah, like that also wrong!",
    "Rubbish lah this!",
    "You think I order this ah?",
    "Oi, not like that!",
    "Cheh!",
    "Dey, this is wrong!",
    "Buay tahan!",
    "What is this sia?!",
    "Bro, you okay not?",
    "Pengsan already!",
    "Give me patience lah!",
    "Try harder lah!",
    "Mampus!",
]

CORRECT_REACTIONS: List[str] = [
    "Shiok ah!",
    "Steady lah!",
    "Wah, power!",
    "Terima kasih!",
    "Xie xie ah!",
    "Nandri!",
    "Thank you boss!",
    "Fuiyoh!",
    "Gao dim!",
    "Perfect lah!",
    "Best sia!",
    "Very the good!",
    "Swee lah!",
    "Wah, pro sia!",
    "You da best lah!",
    "Correct correct!",
    "Yes! This one!",
    "Exactly what I want!",
    "Wah, kopi sifu power!",
    "Legend sia!",
    "Champion!",
    "Like that can already!",
    "Huat ah!",
    "Ong ah!",
    "Wah, damn fast!",
    "Nice nice nice!",
    "So good!",
    "Ok can!",
    "Thumbs up!",
    "Boleh!",
    "Sedap!",
    "Ho lim!",
    "Bagus!",
    "Cannot complain!",
    "Top notch!",
    "Solid lah!",
    "First class!",
    "A+ order sia!",
    "Mmm, just right!",
    "You know your stuff!",
    "Eh, young talent sia!",
    "Terbaik!",
    "Like pro already!",
    "Kampung taste!",
    "Damn shiok!",
    "You got the touch!",
    "Steady pom pi pi!",
    "Lagi best!",
    "Come I give you tip!",
]

# Shown on the "what went wrong" panel
QUOTES: List[str] = [
    "Every sifu was once a blur apprentice.",
    "The sock filter does not rush. Neither should you.",
    "Slow pour, good kopi.",
    "Condensed milk first, then the story.",
    "One wrong cup never closed a stall.",
    "The queue forgives faster than the auntie.",
    "Strong kopi, strong heart.",
    "Di Lo is not a mistake, it is a lifestyle.",
    "Kosong means kosong. No sugar, no excuses.",
    "Peng is easy. Remembering it is hard.",
    "Uncle also spill last time.",
    "The best cup is the next cup.",
    "Hot water is not optional, boss.",
    "Teh or kopi, the customer is always watching.",
    "Stall lights on, mind switched on.",
    "Breathe in, pull the tea, breathe out.",
    "Regulars remember. So must you.",
    "A good stall is built one cup at a time.",
    "Siu Dai today, sweet success tomorrow.",
    "If you never mess up, you never pull enough tea.",
]

# Shouted from the queue when a new shift starts
CROWD_COMMENTS: List[str] = [
    "Wah, the queue damn long!",
    "This stall famous one!",
    "Boss, faster leh!",
    "The kopi here is shiok!",
    "Auntie say this one best!",
    "Queue since 6am sia!",
    "Must try the kopi gau!",
    "My friend recommend this stall!",
    "The uncle here very power!",
    "Worth the wait lah!",
    "Eh, got seat or not?",
    "Wah, smell so good!",
    "This one Michelin star stall!",
    "Can I dabao also?",
    "Steady, business booming!",
]


class ShuffleCycle(Generic[T]):
    """
    Deal items in a random order without repeats until all are used, then
    reshuffle and go again.

    Example:
        >>> cycle = ShuffleCycle(["a", "b", "c"], random.Random(1))
        >>> sorted(cycle.next() for _ in range(3))
        ['a', 'b', 'c']
    """

    def __init__(self, items: Sequence[T], rng: Optional[random.Random] = None):
        if not items:
            raise ValueError("ShuffleCycle needs at least one item")
        self._items = list(items)
        self._rng = rng or random.Random()
        self._shuffled: List[T] = []
        self._index = 0
        self._reshuffle()

    def _reshuffle(self):
        self._shuffled = list(self._items)
        self._rng.shuffle(self._shuffled)
        self._index = 0

    def next(self) -> T:
        if self._index >= len(self._shuffled):
            self._reshuffle()
        item = self._shuffled[self._index]
        self._index += 1
        return item

    def reset(self):
        self._reshuffle()

    def __len__(self) -> int:
        return len(self._items)
