"""Tests for cards, the deck and dealing."""
import random
import pytest

from models import (
    Card, Suit, Seat, Phase, Room, Bid, TrickPlay, CapturedTrick, Participant,
    create_deck, shuffle_deck, deal_hands, sort_hand, card_id, card_equals, card_display,
)


class TestCard:

    def test_equality_by_rank_and_suit(self):
        assert Card(12, Suit.HEARTS) == Card(12, Suit.HEARTS)
        assert card_equals(Card(12, Suit.HEARTS), Card(12, Suit.HEARTS))
        assert not card_equals(Card(12, Suit.HEARTS), Card(12, Suit.CLUBS))

    def test_card_is_hashable_and_immutable(self):
        card = Card(14, Suit.SPADES)
        assert {card, Card(14, Suit.SPADES)} == {card}
        with pytest.raises(AttributeError):
            card.rank = 2

    def test_invalid_rank_rejected(self):
        with pytest.raises(ValueError):
            Card(1, Suit.SPADES)
        with pytest.raises(ValueError):
            Card(15, Suit.SPADES)

    def test_non_integer_rank_rejected(self):
        for rank in (2.7, 2.0, True, "10"):
            with pytest.raises(ValueError):
                Card.from_dict({"rank": rank, "suit": "S"})
        with pytest.raises(ValueError):
            Card(10.0, Suit.SPADES)

    def test_id_and_display(self):
        card = Card(10, Suit.DIAMONDS)
        assert card_id(card) == "10-D"
        assert Card.from_id("10-D") == card
        assert card_display(Card(11, Suit.SPADES)) == "J♠"

    def test_dict_form(self):
        card = Card(13, Suit.CLUBS)
        assert card.to_dict() == {"rank": 13, "suit": "C"}
        assert Card.from_dict({"rank": 13, "suit": "C"}) == card

    def test_game_points(self):
        assert Card(10, Suit.CLUBS).game_points == 10
        assert Card(14, Suit.CLUBS).game_points == 4
        assert Card(13, Suit.CLUBS).game_points == 3
        assert Card(12, Suit.CLUBS).game_points == 2
        assert Card(11, Suit.CLUBS).game_points == 1
        assert Card(9, Suit.CLUBS).game_points == 0


class TestDeck:

    def test_deck_has_52_unique_cards(self):
        deck = create_deck()
        assert len(deck) == 52
        assert len({(c.rank, c.suit) for c in deck}) == 52

    def test_deck_order_is_deterministic(self):
        assert create_deck() == create_deck()
        assert create_deck()[0] == Card(2, Suit.SPADES)
        assert create_deck()[-1] == Card(14, Suit.CLUBS)

    def test_shuffle_returns_permutation_without_mutating(self):
        deck = create_deck()
        shuffled = shuffle_deck(deck, random.Random(3))
        assert deck == create_deck()
        assert sorted(shuffled, key=card_id) == sorted(deck, key=card_id)
        assert shuffled != deck

    def test_shuffle_is_reproducible_with_seed(self):
        assert shuffle_deck(create_deck(), random.Random(42)) == \
            shuffle_deck(create_deck(), random.Random(42))


class TestDealing:

    @pytest.mark.parametrize("dealer", [0, 1, 2, 3])
    def test_deal_gives_six_unique_cards_each(self, dealer):
        hands = deal_hands(dealer, random.Random(dealer))
        assert len(hands) == 4
        assert all(len(h) == 6 for h in hands)
        dealt = [c for h in hands for c in h]
        assert len(set(dealt)) == 24

    def test_deal_order_starts_left_of_dealer(self):
        """Dealer East: South gets cards 0-2 and 12-14 of the shuffled deck."""
        rng_seed = 11
        deck = shuffle_deck(create_deck(), random.Random(rng_seed))
        hands = deal_hands(Seat.EAST, random.Random(rng_seed))

        assert set(hands[Seat.SOUTH]) == set(deck[0:3] + deck[12:15])
        assert set(hands[Seat.WEST]) == set(deck[3:6] + deck[15:18])
        assert set(hands[Seat.NORTH]) == set(deck[6:9] + deck[18:21])
        assert set(hands[Seat.EAST]) == set(deck[9:12] + deck[21:24])

    def test_hands_are_sorted_by_suit_then_rank_desc(self):
        hands = deal_hands(0, random.Random(5))
        for hand in hands:
            assert hand == sort_hand(hand)

    def test_sort_hand(self):
        hand = [Card(3, Suit.CLUBS), Card(14, Suit.HEARTS), Card(2, Suit.SPADES),
                Card(12, Suit.SPADES), Card(9, Suit.DIAMONDS)]
        assert sort_hand(hand) == [
            Card(12, Suit.SPADES), Card(2, Suit.SPADES), Card(14, Suit.HEARTS),
            Card(9, Suit.DIAMONDS), Card(3, Suit.CLUBS),
        ]


class TestRoomSerialization:

    def test_room_survives_a_store_round_trip(self):
        room = Room(room_code="ABCD", player1=Participant(id="p1", name="Alice"))
        room.phase = Phase.TRICK_PLAY
        room.hands = deal_hands(2, random.Random(1))
        room.original_hands = [list(h) for h in room.hands]
        room.trump_suit = Suit.HEARTS
        room.bids = [Bid(3, 0), Bid(0, 2)]
        room.high_bid = Bid(0, 2)
        room.trick_plays = [TrickPlay(1, room.hands[1][0])]
        room.captured_tricks = [CapturedTrick(winner=2, cards=[TrickPlay(2, Card(5, Suit.CLUBS))])]
        room.player_names = {0: "Alice", 1: "Waiting..."}
        room.bid_bubbles = {3: "PASS"}
        room.ai_preferred_suit = {2: Suit.CLUBS}

        restored = Room.from_dict(room.to_dict())
        assert restored == room
