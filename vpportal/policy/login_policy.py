from dataclasses import dataclass

@dataclass(frozen=True)
class LoginPolicy:
    # Thresholds (consecutive wrong picks before the cooldown kicks in)
    max_attempts: int = 5
    lock_duration_sec: int = 30

    # Copy you want for UI
    msg_wrong_guess: str = "That's not right. Try again! ({n} {attempts} left)"
    msg_locked: str = "Too many incorrect attempts. Try again in {n}s or ask your teacher for help."
    msg_cannot_verify: str = "We couldn't check your picture password. Ask your teacher for help."
    msg_malformed: str = "Pick your picture password again."

    def wrong_guess_message(self, attempts_remaining: int) -> str:
        word = "attempts" if attempts_remaining != 1 else "attempt"
        return self.msg_wrong_guess.format(n=attempts_remaining, attempts=word)

    def locked_message(self, remaining_seconds: int) -> str:
        return self.msg_locked.format(n=remaining_seconds)
