from __future__ import annotations

from dialogue_coach.content.models import GUEST, STAFF, Dialogue, DialogueLine

# Shown when the content store has no dialogues yet.
_SAMPLE_SCRIPTS = [
    {
        "id": "weather-1",
        "title": "Weather",
        "lines": [
            (STAFF, "Good morning, Ma'am!", "Chào buổi sáng, thưa bà!"),
            (GUEST, "Good morning.", "Chào buổi sáng."),
            (STAFF, "How are you today, Ma'am?", "Hôm nay bà có khỏe không ạ?"),
            (
                GUEST,
                "I'm good. Do you know the weather forecast for today? What is the weather like?",
                "Tôi khỏe. Bạn có biết dự báo thời tiết hôm nay không? Thời tiết thế nào?",
            ),
            (
                STAFF,
                "It's going to be sunny until midday, then there will be showers in the afternoon.",
                "Trời sẽ nắng đến trưa, sau đó sẽ có mưa rào vào buổi chiều.",
            ),
            (GUEST, "I hate the rain. Does it often rain in this season?", "Tôi ghét mưa. Mùa này có hay mưa không?"),
            (
                STAFF,
                "Yes, Ma'am. It's now the rainy season in Phu Quoc. Do you have plans for today?",
                "Vâng thưa bà. Bây giờ là mùa mưa ở Phú Quốc. Bà có kế hoạch gì cho hôm nay không?",
            ),
            (
                GUEST,
                "I'm gonna spend the morning at the pool and then go sightseeing in the afternoon.",
                "Tôi sẽ dành buổi sáng ở hồ bơi và sau đó đi tham quan vào buổi chiều.",
            ),
            (
                STAFF,
                "So I think you should bring an umbrella in case it might rain.",
                "Vậy tôi nghĩ bà nên mang theo ô phòng trường hợp trời mưa.",
            ),
            (GUEST, "Ok, thank you.", "Vâng, cảm ơn bạn."),
            (STAFF, "It's my pleasure. Have a nice day, Ma'am.", "Đó là niềm vui của tôi. Chúc bà một ngày tốt lành."),
        ],
    },
    {
        "id": "check-in-1",
        "title": "Check-in",
        "lines": [
            (
                STAFF,
                "Good afternoon and welcome to YOKO Onsen Spa & Resort!",
                "Chào buổi chiều và chào mừng đến với YOKO Onsen Spa & Resort!",
            ),
            (
                GUEST,
                "Thank you. I have a reservation under the name Johnson.",
                "Cảm ơn. Tôi có đặt phòng dưới tên Johnson.",
            ),
            (
                STAFF,
                "Yes, I can see your booking here. You have reserved a Deluxe Room for 3 nights, is that correct?",
                "Vâng, tôi có thể thấy đặt phòng của bạn ở đây. Bạn đã đặt phòng Deluxe trong 3 đêm, đúng không ạ?",
            ),
            (GUEST, "That's right.", "Đúng rồi."),
            (STAFF, "May I see your passport, please?", "Cho tôi xem hộ chiếu của bạn được không ạ?"),
            (GUEST, "Sure, here you go.", "Được, đây ạ."),
            (
                STAFF,
                "Thank you. Your room is on the 5th floor with a beautiful valley view. Here is your key card.",
                "Cảm ơn. Phòng của bạn ở tầng 5 với view thung lũng tuyệt đẹp. Đây là thẻ phòng của bạn.",
            ),
            (GUEST, "What time is breakfast served?", "Bữa sáng được phục vụ lúc mấy giờ?"),
            (
                STAFF,
                "Breakfast is served from 6:30 AM to 10:00 AM at our main restaurant on the ground floor.",
                "Bữa sáng được phục vụ từ 6:30 sáng đến 10:00 sáng tại nhà hàng chính ở tầng trệt.",
            ),
            (GUEST, "Perfect, thank you very much.", "Tuyệt vời, cảm ơn rất nhiều."),
            (STAFF, "You're welcome. Enjoy your stay!", "Không có gì. Chúc bạn có kỳ nghỉ vui vẻ!"),
        ],
    },
]


def sample_dialogues() -> list[Dialogue]:
    return [
        Dialogue(
            id=script["id"],
            title=script["title"],
            lines=tuple(
                DialogueLine(speaker=speaker, primary_text=text, secondary_text=translation)
                for speaker, text, translation in script["lines"]
            ),
        )
        for script in _SAMPLE_SCRIPTS
    ]
